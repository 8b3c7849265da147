from ...domain.entities import User
from ..dto import PageView
from .route_guard import DASHBOARD_PATH, LOGIN_PATH, ONBOARDING_PATH

# повторяет часть политики guard'а на уровне страниц; это UX, а не граница безопасности


def _variant(user: User) -> str:
    return "sales_rep" if user.role == "sales_rep" else "business_owner"


def dashboard_view(user: User | None, is_loading: bool) -> PageView:
    if is_loading:
        return PageView(page="loading")
    if user is None:
        return PageView(page="dashboard", redirect_to=LOGIN_PATH)
    if not user.onboarding_completed:
        return PageView(page="dashboard", redirect_to=ONBOARDING_PATH)
    return PageView(page="dashboard", variant=_variant(user), user=user)


def onboarding_view(user: User | None, is_loading: bool) -> PageView:
    if is_loading:
        return PageView(page="loading")
    if user is None:
        return PageView(page="onboarding", redirect_to=LOGIN_PATH)
    if user.onboarding_completed:
        return PageView(page="onboarding", redirect_to=DASHBOARD_PATH)
    return PageView(page="onboarding", variant=_variant(user), user=user)
