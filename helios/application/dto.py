from dataclasses import dataclass
from typing import Literal

from ..domain.entities import User

GuardAction = Literal["allow", "redirect"]


@dataclass(frozen=True)
class GuardDecision:
    action: GuardAction
    target: str | None = None

    @property
    def allowed(self) -> bool:
        return self.action == "allow"


ALLOW = GuardDecision(action="allow")


def redirect(target: str) -> GuardDecision:
    return GuardDecision(action="redirect", target=target)


@dataclass(frozen=True)
class PageView:
    """Результат проверки доступа к странице: отрисовать или перенаправить."""
    page: str
    variant: str | None = None
    user: User | None = None
    redirect_to: str | None = None
