from ..codec import SessionDecodeError, read_onboarding_status
from ..dto import ALLOW, GuardDecision, redirect

PROTECTED_ROUTES = ("/dashboard", "/jobs", "/applications", "/profile", "/company", "/search")
AUTH_ROUTES = ("/login", "/signup")
ONBOARDING_ROUTE = "/onboarding"

LOGIN_PATH = "/login"
ONBOARDING_PATH = "/onboarding"
DASHBOARD_PATH = "/dashboard"


def is_protected(path: str) -> bool:
    return any(path.startswith(route) for route in PROTECTED_ROUTES)


def is_auth(path: str) -> bool:
    return any(path.startswith(route) for route in AUTH_ROUTES)


def is_onboarding(path: str) -> bool:
    return path.startswith(ONBOARDING_ROUTE)


def evaluate(path: str, cookie: str | None) -> GuardDecision:
    """Решение guard'а для одного перехода. Чистая функция: порядок проверок фиксирован."""
    # пустая cookie (после logout) считается отсутствующей
    has_session = bool(cookie)

    if is_onboarding(path) and has_session:
        return ALLOW

    if is_protected(path) and not has_session:
        return redirect(LOGIN_PATH)

    if is_auth(path) and has_session:
        try:
            status = read_onboarding_status(cookie)
        except SessionDecodeError:
            return redirect(DASHBOARD_PATH)
        if status != "completed":
            return redirect(ONBOARDING_PATH)
        return redirect(DASHBOARD_PATH)

    return ALLOW
