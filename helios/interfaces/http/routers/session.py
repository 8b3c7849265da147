from typing import Callable

from fastapi import APIRouter, Depends, HTTPException, Request, status
from slowapi import Limiter

from ....application.use_cases.session_store import SessionStore
from ....infrastructure.metrics import session_operations_total
from ....infrastructure.network import NetworkError
from ..schemas import (
    LoginReq,
    NavigationResp,
    OnboardingReq,
    SessionResp,
    SignupReq,
    UserResp,
    UserEnvelope,
    UserUpdate,
)
from ..session import NavigationLog, get_navigator, get_session_store

router = APIRouter(prefix="/api/session", tags=["session"])

def get_limiter(request: Request) -> Limiter:
    return request.app.state.limiter

# slowapi добавляет лимит при каждом вызове limit(), поэтому оборачиваем один раз
_limited_impls: dict[tuple[int, str, str], Callable] = {}

def _rate_limited(limiter: Limiter, limit: str, func: Callable) -> Callable:
    key = (id(limiter), limit, func.__name__)
    if key not in _limited_impls:
        _limited_impls[key] = limiter.limit(limit)(func)
    return _limited_impls[key]

def _user_or_none(user) -> UserResp | None:
    return UserResp.from_domain(user) if user is not None else None

@router.get("", response_model=SessionResp)
def current_session(store: SessionStore = Depends(get_session_store)):
    return SessionResp(user=_user_or_none(store.user), is_loading=store.is_loading)

async def _signup_impl(
    request: Request,
    payload: SignupReq,
    store: SessionStore,
    navigator: NavigationLog,
):
    if not payload.name or not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="All fields are required")
    try:
        user = await store.signup(payload.email, payload.password, payload.name, payload.role)
    except NetworkError:
        session_operations_total.labels(operation="signup", outcome="failed").inc()
        raise HTTPException(status_code=503, detail="Failed to create account. Please try again.")
    session_operations_total.labels(operation="signup", outcome="ok").inc()
    return NavigationResp(user=UserResp.from_domain(user), redirect_to=navigator.take())

@router.post("/signup", response_model=NavigationResp, status_code=status.HTTP_201_CREATED)
async def signup(
    request: Request,
    payload: SignupReq,
    store: SessionStore = Depends(get_session_store),
    navigator: NavigationLog = Depends(get_navigator),
    limiter: Limiter = Depends(get_limiter),
):
    limit = f"{request.app.state.settings.RATE_LIMIT_PER_MINUTE}/minute"
    limited_func = _rate_limited(limiter, limit, _signup_impl)
    return await limited_func(request, payload, store, navigator)

async def _login_impl(
    request: Request,
    payload: LoginReq,
    store: SessionStore,
    navigator: NavigationLog,
):
    try:
        user = await store.login(payload.email, payload.password)
    except NetworkError:
        session_operations_total.labels(operation="login", outcome="failed").inc()
        raise HTTPException(status_code=503, detail="Failed to log in. Please try again.")
    session_operations_total.labels(operation="login", outcome="ok").inc()
    return NavigationResp(user=UserResp.from_domain(user), redirect_to=navigator.take())

@router.post("/login", response_model=NavigationResp)
async def login(
    request: Request,
    payload: LoginReq,
    store: SessionStore = Depends(get_session_store),
    navigator: NavigationLog = Depends(get_navigator),
    limiter: Limiter = Depends(get_limiter),
):
    # Более строгий лимит для логина
    limited_func = _rate_limited(limiter, request.app.state.settings.LOGIN_RATE_LIMIT, _login_impl)
    return await limited_func(request, payload, store, navigator)

@router.post("/logout", response_model=NavigationResp)
def logout(
    store: SessionStore = Depends(get_session_store),
    navigator: NavigationLog = Depends(get_navigator),
):
    store.logout()
    session_operations_total.labels(operation="logout", outcome="ok").inc()
    return NavigationResp(user=None, redirect_to=navigator.take())

@router.patch("/user", response_model=UserEnvelope)
def update_user(payload: UserUpdate, store: SessionStore = Depends(get_session_store)):
    user = store.update_user(payload.to_changes())
    if user is None:
        session_operations_total.labels(operation="update", outcome="no_session").inc()
        raise HTTPException(status_code=401, detail="Not logged in")
    session_operations_total.labels(operation="update", outcome="ok").inc()
    return UserEnvelope(user=UserResp.from_domain(user))

@router.post("/onboarding", response_model=NavigationResp)
async def complete_onboarding(
    payload: OnboardingReq,
    store: SessionStore = Depends(get_session_store),
    navigator: NavigationLog = Depends(get_navigator),
):
    try:
        user = await store.complete_onboarding(payload.profileData)
    except NetworkError:
        session_operations_total.labels(operation="onboarding", outcome="failed").inc()
        raise HTTPException(status_code=503, detail="Failed to complete onboarding. Please try again.")
    if user is None:
        session_operations_total.labels(operation="onboarding", outcome="no_session").inc()
        raise HTTPException(status_code=401, detail="Not logged in")
    session_operations_total.labels(operation="onboarding", outcome="ok").inc()
    return NavigationResp(user=UserResp.from_domain(user), redirect_to=navigator.take())
