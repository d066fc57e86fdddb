"""Shared fixtures: in-memory SQLite sessions and a TestClient bound to them."""

from collections.abc import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.main import app
from app.models import Base
from app.scripts.seed import seed_accounts, seed_roles

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"
TEACHER_EMAIL = "teacher@example.com"
TEACHER_PASSWORD = "teacher123"


def make_session_factory(with_accounts: bool = False, url: str = "sqlite://") -> sessionmaker:
    """
    Fresh database with the schema, the fixed roles and optionally the seed accounts.

    The default in-memory URL shares one connection across sessions; pass a file URL
    when sessions need independent connections.
    """
    options: dict = {"connect_args": {"check_same_thread": False}}
    if url == "sqlite://":
        options["poolclass"] = StaticPool
    engine = create_engine(url, **options)
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    with factory() as db:
        seed_roles(db)
        if with_accounts:
            seed_accounts(db)
    return factory


def make_client(factory: sessionmaker) -> TestClient:
    """TestClient whose get_db dependency yields sessions from factory. Call clear_overrides() after."""

    def override_get_db() -> Generator[Session, None, None]:
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


def clear_overrides() -> None:
    app.dependency_overrides.clear()


def login(client: TestClient, email: str, password: str) -> dict:
    """Log in and return the envelope's data (user, access_token, refresh_token)."""
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]


def bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def csrf_headers(client: TestClient, access_token: str) -> dict[str, str]:
    """Fetch a CSRF token (the response sets the cookie on client) and return auth + CSRF headers."""
    token = client.get("/auth/csrf").json()["data"]["csrfToken"]
    return {**bearer(access_token), "X-CSRF-Token": token}
