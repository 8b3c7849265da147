from typing import Any, Literal

from pydantic import BaseModel, EmailStr, Field

from ...domain.entities import User

class SignupReq(BaseModel):
    # пустые поля проверяет роутер, чтобы вернуть сообщение формы;
    # непустой email валидируется так же, как при входе
    email: EmailStr | Literal[""] = ""
    password: str = ""
    name: str = ""
    role: Literal["sales_rep", "business_owner"] = "sales_rep"

class LoginReq(BaseModel):
    email: EmailStr
    password: str

class UserUpdate(BaseModel):
    email: str | None = None
    name: str | None = None
    onboardingStatus: Literal["not_started", "in_progress", "completed"] | None = None
    profileData: dict[str, Any] | None = None

    def to_changes(self) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=True, exclude_none=True)
        names = {"onboardingStatus": "onboarding_status", "profileData": "profile_data"}
        return {names.get(k, k): v for k, v in data.items()}

class OnboardingReq(BaseModel):
    profileData: dict[str, Any] = Field(default_factory=dict)

class UserResp(BaseModel):
    id: str
    email: str
    name: str
    role: str | None
    onboardingStatus: str
    profileData: dict[str, Any]

    @classmethod
    def from_domain(cls, user: User) -> "UserResp":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            onboardingStatus=user.onboarding_status,
            profileData=dict(user.profile_data),
        )

class SessionResp(BaseModel):
    user: UserResp | None
    is_loading: bool = False

class NavigationResp(BaseModel):
    user: UserResp | None
    redirect_to: str | None = None

class PageResp(BaseModel):
    page: str
    variant: str | None = None
    user: UserResp | None = None

class UserEnvelope(BaseModel):
    user: UserResp
