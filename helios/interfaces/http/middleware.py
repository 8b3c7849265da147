from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

from ...application.use_cases import route_guard
from ...infrastructure.metrics import route_guard_decisions_total


def install_route_guard(app: FastAPI) -> None:
    """Route guard на каждый запрос + отправка отложенных изменений cookie сессии."""

    @app.middleware("http")
    async def guard_routes(request: Request, call_next):
        store = request.app.state.session_store
        cookie_name = request.app.state.settings.SESSION_KEY

        decision = route_guard.evaluate(request.url.path, request.cookies.get(cookie_name))
        if decision.allowed:
            route_guard_decisions_total.labels(decision="allow", target="").inc()
            response = await call_next(request)
        else:
            route_guard_decisions_total.labels(decision="redirect", target=decision.target).inc()
            response = RedirectResponse(decision.target, status_code=307)

        store.cookies.flush(response)
        return response
