import json

from fastapi.testclient import TestClient

from helios.application.codec import encode_user, user_from_cookie
from helios.domain.entities import User

KEY = "helios_user"

def _location(client, path):
    response = client.get(path, follow_redirects=False)
    assert response.status_code == 307
    return response.headers["location"]

def test_protected_routes_without_session(client):
    """Без cookie защищённые страницы ведут на логин"""
    for path in ["/dashboard", "/jobs", "/jobs/17", "/applications", "/profile", "/company", "/search"]:
        assert _location(client, path) == "/login"

def test_public_pages_without_session(client):
    assert client.get("/").json()["page"] == "landing"
    assert client.get("/login").json() == {"page": "login", "variant": None, "user": None}
    assert client.get("/signup?role=business_owner").json()["variant"] == "business_owner"

def test_full_session_flow(client):
    """Интеграционный тест: регистрация -> онбординг -> dashboard -> выход"""
    # 1. Регистрация
    signup = client.post(
        "/api/session/signup",
        json={"email": "a@b.com", "password": "password123", "name": "Ann", "role": "sales_rep"},
    )
    assert signup.status_code == 201
    assert signup.json()["redirect_to"] == "/onboarding"

    # 2. Страницы входа и dashboard уводят на онбординг
    assert _location(client, "/login") == "/onboarding"
    assert _location(client, "/signup") == "/onboarding"
    assert _location(client, "/dashboard") == "/onboarding"

    # 3. Онбординг открыт, вариант по роли
    onboarding = client.get("/onboarding")
    assert onboarding.status_code == 200
    assert onboarding.json()["variant"] == "sales_rep"

    # 4. Завершение онбординга
    done = client.post("/api/session/onboarding", json={"profileData": {"country": "US"}})
    assert done.json()["redirect_to"] == "/dashboard"

    # 5. Теперь страницы входа ведут в dashboard, онбординг уводит туда же
    assert _location(client, "/login") == "/dashboard"
    assert _location(client, "/onboarding") == "/dashboard"
    dashboard = client.get("/dashboard")
    assert dashboard.status_code == 200
    assert dashboard.json()["page"] == "dashboard"
    assert dashboard.json()["variant"] == "sales_rep"
    assert dashboard.json()["user"]["profileData"] == {"country": "US"}

    # 6. Выход
    logout = client.post("/api/session/logout")
    assert logout.json()["redirect_to"] == "/"
    assert client.cookies.get(KEY) is None
    assert _location(client, "/dashboard") == "/login"
    assert client.get("/login").status_code == 200

def test_business_owner_variant(client):
    client.post("/api/session/login", json={"email": "hiring@business.com", "password": "pw"})
    assert client.get("/onboarding").json()["variant"] == "business_owner"

def test_login_page_with_completed_cookie(client):
    """Cookie с completed на /login -> /dashboard"""
    client.cookies.set(KEY, json.dumps({"onboardingStatus": "completed"}))
    assert _location(client, "/login") == "/dashboard"

def test_login_page_with_malformed_cookie(client):
    client.cookies.set(KEY, "garbage")
    assert _location(client, "/signup") == "/dashboard"

def test_login_page_with_deeply_nested_cookie(client):
    """Глубоко вложенный JSON в cookie не роняет guard"""
    client.cookies.set(KEY, "[" * 3000)
    assert _location(client, "/signup") == "/dashboard"

def test_onboarding_with_foreign_cookie_falls_back_to_page_check(client):
    """Guard пропускает на онбординг, но страница без сессии в памяти уводит на логин"""
    client.cookies.set(KEY, "garbage")
    assert _location(client, "/onboarding") == "/login"

def test_startup_restores_session_and_cookie(app, storage):
    """При старте пользователь берётся из хранилища, cookie выставляется заново"""
    user = User(id="user_restored1", email="a@b.com", name="Ann", role="business_owner",
                onboarding_status="completed", profile_data={"companyName": "Acme"})
    storage.set_item(KEY, encode_user(user))

    with TestClient(app) as client:
        session = client.get("/api/session").json()
        assert session["user"]["id"] == "user_restored1"
        assert session["is_loading"] is False
        assert user_from_cookie(client.cookies.get(KEY)) == user

        dashboard = client.get("/dashboard")
        assert dashboard.status_code == 200
        assert dashboard.json()["variant"] == "business_owner"

def test_login_always_goes_to_onboarding(client):
    """Повторный вход завершённого пользователя снова ведёт на онбординг"""
    client.post(
        "/api/session/signup",
        json={"email": "a@b.com", "password": "pw", "name": "Ann", "role": "sales_rep"},
    )
    client.post("/api/session/onboarding", json={"profileData": {}})
    client.post("/api/session/logout")

    login = client.post("/api/session/login", json={"email": "a@b.com", "password": "pw"})
    assert login.json()["user"]["onboardingStatus"] == "not_started"
    assert login.json()["redirect_to"] == "/onboarding"
    assert _location(client, "/dashboard") == "/onboarding"
