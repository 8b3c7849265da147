import secrets
from dataclasses import fields, replace
from typing import Any, Callable, Mapping

import structlog
from fastapi.concurrency import run_in_threadpool

from ...domain.entities import Role, User
from ..codec import SessionDecodeError, decode_user, encode_user, to_cookie_value
from .route_guard import DASHBOARD_PATH, ONBOARDING_PATH

logger = structlog.get_logger()

LANDING_PATH = "/"
DEFAULT_SESSION_KEY = "helios_user"
DEFAULT_COOKIE_MAX_AGE = 60 * 60 * 24 * 30

ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
# id выдаётся при signup, role выбирается один раз
IMMUTABLE_FIELDS = frozenset({"id", "role"})
USER_FIELDS = frozenset(f.name for f in fields(User))


class IDurableStorage:
    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class ICookieJar:
    def set(self, name: str, value: str, max_age: int) -> None: ...
    def clear(self, name: str) -> None: ...


class INavigator:
    def push(self, path: str) -> None: ...


class INetwork:
    async def roundtrip(self) -> None: ...


class ICredentialResolver:
    def resolve(self, email: str, password: str, user_id: str) -> User: ...


class PlaceholderCredentialResolver(ICredentialResolver):
    """Заглушка вместо настоящей проверки учётных данных.

    Пароль не проверяется, роль угадывается по подстроке "business" в email,
    онбординг всегда считается не начатым.
    """

    def resolve(self, email: str, password: str, user_id: str) -> User:
        return User(
            id=user_id,
            email=email,
            name=email.split("@")[0],
            role="business_owner" if "business" in email else "sales_rep",
            onboarding_status="not_started",
            profile_data={},
        )


def generate_user_id() -> str:
    # без проверки на коллизии: уникальность id некому гарантировать
    return "user_" + "".join(secrets.choice(ID_ALPHABET) for _ in range(9))


class SessionStore:
    """Единственный источник правды о текущем пользователе.

    Любое изменение проходит через ``_commit``: память, хранилище и cookie
    обновляются в этом порядке за один вызов. Запись в хранилище идёт вне
    event loop, потому что клиент Redis синхронный.
    """

    def __init__(
        self,
        storage: IDurableStorage,
        cookies: ICookieJar,
        navigator: INavigator,
        network: INetwork,
        credentials: ICredentialResolver | None = None,
        key: str = DEFAULT_SESSION_KEY,
        cookie_max_age: int = DEFAULT_COOKIE_MAX_AGE,
        id_factory: Callable[[], str] = generate_user_id,
    ):
        self.storage = storage
        self.cookies = cookies
        self.navigator = navigator
        self.network = network
        self.credentials = credentials or PlaceholderCredentialResolver()
        self.key = key
        self.cookie_max_age = cookie_max_age
        self.id_factory = id_factory
        self.user: User | None = None
        self.is_loading = True

    def initialize(self) -> User | None:
        raw = self.storage.get_item(self.key)
        if raw:
            try:
                self.user = decode_user(raw)
            except SessionDecodeError as e:
                logger.warning("stored_session_unreadable", key=self.key, error=str(e))
            else:
                # cookie могли удалить отдельно от хранилища
                self.cookies.set(self.key, to_cookie_value(self.user), self.cookie_max_age)
        self.is_loading = False
        logger.info("session_initialized", user_id=self.user.id if self.user else None)
        return self.user

    async def signup(self, email: str, password: str, name: str, role: Role | None) -> User:
        self.is_loading = True
        try:
            await self.network.roundtrip()
            user = User(
                id=self.id_factory(),
                email=email,
                name=name,
                role=role,
                onboarding_status="not_started",
                profile_data={},
            )
            await run_in_threadpool(self._commit, user)
            logger.info("signup_succeeded", user_id=user.id, role=role)
            self.navigator.push(ONBOARDING_PATH)
            return user
        except Exception as e:
            logger.error("signup_failed", email=email, error=str(e))
            raise
        finally:
            self.is_loading = False

    async def login(self, email: str, password: str) -> User:
        self.is_loading = True
        try:
            await self.network.roundtrip()
            user = self.credentials.resolve(email, password, self.id_factory())
            await run_in_threadpool(self._commit, user)
            logger.info("login_succeeded", user_id=user.id, role=user.role)
            self.navigator.push(DASHBOARD_PATH if user.onboarding_completed else ONBOARDING_PATH)
            return user
        except Exception as e:
            logger.error("login_failed", email=email, error=str(e))
            raise
        finally:
            self.is_loading = False

    def logout(self) -> None:
        if self.user is not None:
            logger.info("logout", user_id=self.user.id)
        self._commit(None)
        self.navigator.push(LANDING_PATH)

    def update_user(self, changes: Mapping[str, Any]) -> User | None:
        if self.user is None:
            logger.warning("update_without_session", fields=sorted(changes))
            return None
        unknown = set(changes) - USER_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {', '.join(sorted(unknown))}")
        frozen = IMMUTABLE_FIELDS.intersection(changes)
        if frozen:
            raise ValueError(f"Fields cannot be changed: {', '.join(sorted(frozen))}")
        changes = dict(changes)
        if "profile_data" in changes:
            # копия, чтобы вызывающий код не менял пользователя в памяти в обход хранилища
            changes["profile_data"] = dict(changes["profile_data"])
        updated = replace(self.user, **changes)
        self._commit(updated)
        return updated

    async def complete_onboarding(self, profile_data: Mapping[str, Any]) -> User | None:
        try:
            await self.network.roundtrip()
        except Exception as e:
            logger.error("onboarding_failed", error=str(e))
            raise
        user = await run_in_threadpool(
            self.update_user, {"onboarding_status": "completed", "profile_data": profile_data}
        )
        if user is not None:
            logger.info("onboarding_completed", user_id=user.id)
            self.navigator.push(DASHBOARD_PATH)
        return user

    def _commit(self, user: User | None) -> None:
        if user is None:
            self.user = None
            self.storage.remove_item(self.key)
            self.cookies.clear(self.key)
            return
        # сначала сериализация: невалидная запись не должна попасть даже в память
        raw = encode_user(user)
        cookie_value = to_cookie_value(user)
        self.user = user
        self.storage.set_item(self.key, raw)
        self.cookies.set(self.key, cookie_value, self.cookie_max_age)
