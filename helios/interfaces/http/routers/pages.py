from typing import Literal

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse

from ....application.dto import PageView
from ....application.use_cases.page_access import dashboard_view, onboarding_view
from ....application.use_cases.session_store import SessionStore
from ..schemas import PageResp, UserResp
from ..session import get_session_store

router = APIRouter(tags=["pages"])

def _render(view: PageView):
    if view.redirect_to:
        return RedirectResponse(view.redirect_to, status_code=307)
    user = UserResp.from_domain(view.user) if view.user is not None else None
    return PageResp(page=view.page, variant=view.variant, user=user)

@router.get("/", response_model=PageResp)
def landing(store: SessionStore = Depends(get_session_store)):
    return _render(PageView(page="landing", user=store.user))

@router.get("/login", response_model=PageResp)
def login_page():
    return PageResp(page="login")

@router.get("/signup", response_model=PageResp)
def signup_page(role: Literal["sales_rep", "business_owner"] | None = Query(None)):
    # роль по умолчанию можно передать ссылкой с лендинга: /signup?role=business_owner
    return PageResp(page="signup", variant=role or "sales_rep")

@router.get("/onboarding", response_model=PageResp)
def onboarding_page(store: SessionStore = Depends(get_session_store)):
    return _render(onboarding_view(store.user, store.is_loading))

@router.get("/dashboard", response_model=PageResp)
def dashboard_page(store: SessionStore = Depends(get_session_store)):
    return _render(dashboard_view(store.user, store.is_loading))
