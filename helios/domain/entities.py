from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["sales_rep", "business_owner"]
OnboardingStatus = Literal["not_started", "in_progress", "completed"]

ROLES = ("sales_rep", "business_owner")
ONBOARDING_STATUSES = ("not_started", "in_progress", "completed")


@dataclass(frozen=True)
class User:
    id: str
    email: str
    name: str
    role: Role | None = None
    onboarding_status: OnboardingStatus = "not_started"
    profile_data: dict[str, Any] = field(default_factory=dict)

    @property
    def onboarding_completed(self) -> bool:
        return self.onboarding_status == "completed"
