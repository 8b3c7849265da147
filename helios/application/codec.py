"""Формат записи сессии.

Один и тот же JSON пишется в долговременное хранилище и, в percent-encoding,
в cookie ``helios_user``, которую читает guard. Ключи в camelCase, поля версии
нет: любое изменение ``UserRecord`` ломает уже сохранённые сессии и выданные cookie.
"""

import json
from typing import Any
from urllib.parse import quote, unquote

from pydantic import BaseModel, Field, ValidationError

from ..domain.entities import OnboardingStatus, Role, User


class SessionDecodeError(ValueError):
    pass


class UserRecord(BaseModel):
    id: str
    email: str
    name: str
    role: Role | None = None
    onboardingStatus: OnboardingStatus
    profileData: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, user: User) -> "UserRecord":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            onboardingStatus=user.onboarding_status,
            profileData=dict(user.profile_data),
        )

    def to_domain(self) -> User:
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            role=self.role,
            onboarding_status=self.onboardingStatus,
            profile_data=dict(self.profileData),
        )


def encode_user(user: User) -> str:
    return UserRecord.from_domain(user).model_dump_json()


def decode_user(raw: str) -> User:
    try:
        return UserRecord.model_validate_json(raw).to_domain()
    except ValidationError as e:
        raise SessionDecodeError(str(e)) from e


def to_cookie_value(user: User) -> str:
    return quote(encode_user(user), safe="")


def user_from_cookie(raw: str) -> User:
    return decode_user(unquote(raw))


def read_onboarding_status(raw_cookie: str) -> Any:
    """Достаёт только onboardingStatus из cookie, не валидируя остальную запись.

    Бросает SessionDecodeError, если значение не является JSON-объектом.
    """
    try:
        data = json.loads(unquote(raw_cookie))
    # слишком глубокая вложенность даёт RecursionError, а не ValueError
    except (ValueError, RecursionError) as e:
        raise SessionDecodeError(str(e)) from e
    if not isinstance(data, dict):
        raise SessionDecodeError("session cookie is not a JSON object")
    return data.get("onboardingStatus")
