from fastapi import Request, Response

from ...application.use_cases.session_store import ICookieJar, INavigator, SessionStore


class CookieOutbox(ICookieJar):
    """Копит изменения cookie сессии до ближайшего ответа клиенту."""

    def __init__(self):
        self.pending: dict[str, tuple[str, int] | None] = {}

    def set(self, name: str, value: str, max_age: int) -> None:
        self.pending[name] = (value, max_age)

    def clear(self, name: str) -> None:
        self.pending[name] = None

    def flush(self, response: Response) -> None:
        for name, directive in self.pending.items():
            if directive is None:
                response.delete_cookie(name, path="/")
            else:
                value, max_age = directive
                response.set_cookie(name, value, max_age=max_age, path="/")
        self.pending.clear()


class NavigationLog(INavigator):
    def __init__(self):
        self.history: list[str] = []
        self.pending: str | None = None

    def push(self, path: str) -> None:
        self.history.append(path)
        self.pending = path

    def take(self) -> str | None:
        path, self.pending = self.pending, None
        return path


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_navigator(request: Request) -> NavigationLog:
    return request.app.state.session_store.navigator
