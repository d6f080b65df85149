from __future__ import annotations

from pathlib import Path
from uuid import uuid4

import pytest
import sqlalchemy as sa
from alembic.config import Config
from fastapi.testclient import TestClient

from alembic import command
from apps.api.main import create_app
from tour_booking.application.ports.user_repository_port import UserRecord
from tour_booking.config.settings import Settings
from tour_booking.application.services.admin_bootstrap_service import AdminBootstrapConfigError
from tour_booking.infrastructure.security.password_hasher import BcryptPasswordHasher

REQUIRED_ENV = {
    "JWT_SECRET": "bootstrap-signing-secret",
    "BCRYPT_ROUNDS": "4",
}


class SilentEmailSender:
    async def send_welcome(self, *, user: UserRecord, url: str) -> None:
        return None

    async def send_password_reset(self, *, user: UserRecord, url: str) -> None:
        return None


def _upgrade_head(tmp_path: Path, filename: str) -> tuple[str, str]:
    db_path = tmp_path / filename
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")
    return sync_url, async_url


def _set_runtime_env(monkeypatch: pytest.MonkeyPatch, *, database_url: str) -> None:
    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.setenv("DATABASE_URL", database_url)
    monkeypatch.delenv("BOOTSTRAP_ADMIN_EMAIL", raising=False)
    monkeypatch.delenv("BOOTSTRAP_ADMIN_PASSWORD", raising=False)
    monkeypatch.delenv("BOOTSTRAP_ADMIN_PASSWORD_FILE", raising=False)


def _insert_user(connection: sa.Connection, *, email: str, role: str = "user") -> None:
    connection.execute(
        sa.text(
            "INSERT INTO users (id, name, email, password_hash, role, is_active) "
            "VALUES (:id, 'Existing User', :email, :password_hash, :role, 1)"
        ),
        {
            "id": uuid4().hex,
            "email": email,
            "password_hash": BcryptPasswordHasher(rounds=4).hash_password("existing-password"),
            "role": role,
        },
    )


def _create_runtime_test_client() -> TestClient:
    app = create_app(settings=Settings(_env_file=None), email_sender=SilentEmailSender())
    return TestClient(app)


@pytest.mark.asyncio
async def test_startup_bootstrap_creates_first_admin_from_env_password(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "admin_bootstrap_env_password.db")
    _set_runtime_env(monkeypatch, database_url=async_url)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_EMAIL", "Bootstrap-Admin@Example.com")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD", "bootstrap-password")

    with _create_runtime_test_client() as client:
        response = client.post(
            "/api/v1/users/login",
            json={
                "email": "bootstrap-admin@example.com",
                "password": "bootstrap-password",
            },
        )
        listing = client.get("/api/v1/users")

    assert response.status_code == 200
    assert response.json()["data"]["user"]["role"] == "admin"
    assert listing.status_code == 200

    with sa.create_engine(sync_url).begin() as connection:
        row = connection.execute(
            sa.text(
                "SELECT name, email, role, is_active FROM users WHERE email = :email LIMIT 1"
            ),
            {"email": "bootstrap-admin@example.com"},
        ).mappings().one()
        count = connection.execute(sa.text("SELECT COUNT(*) AS count FROM users")).mappings().one()

    assert row["name"] == "Administrator"
    assert row["role"] == "admin"
    assert bool(row["is_active"]) is True
    assert int(count["count"]) == 1


@pytest.mark.asyncio
async def test_startup_bootstrap_reads_admin_password_from_file(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _, async_url = _upgrade_head(tmp_path, "admin_bootstrap_password_file.db")
    password_file = tmp_path / "bootstrap-password.txt"
    password_file.write_text("bootstrap-from-file\n", encoding="utf-8")
    _set_runtime_env(monkeypatch, database_url=async_url)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_EMAIL", "file-admin@example.com")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD_FILE", str(password_file))

    with _create_runtime_test_client() as client:
        response = client.post(
            "/api/v1/users/login",
            json={
                "email": "file-admin@example.com",
                "password": "bootstrap-from-file",
            },
        )

    assert response.status_code == 200
    assert response.json()["data"]["user"]["role"] == "admin"


@pytest.mark.asyncio
async def test_startup_bootstrap_does_not_create_admin_when_users_exist(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    sync_url, async_url = _upgrade_head(tmp_path, "admin_bootstrap_existing_user.db")
    _set_runtime_env(monkeypatch, database_url=async_url)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_EMAIL", "bootstrap-admin@example.com")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD", "bootstrap-password")

    with sa.create_engine(sync_url).begin() as connection:
        _insert_user(connection, email="existing-traveller@example.com")

    with _create_runtime_test_client() as client:
        response = client.post(
            "/api/v1/users/login",
            json={
                "email": "bootstrap-admin@example.com",
                "password": "bootstrap-password",
            },
        )

    assert response.status_code == 401
    assert response.json() == {"status": "fail", "message": "Incorrect email or password"}

    with sa.create_engine(sync_url).begin() as connection:
        count = connection.execute(sa.text("SELECT COUNT(*) AS count FROM users")).mappings().one()

    assert int(count["count"]) == 1


@pytest.mark.asyncio
async def test_startup_bootstrap_rejects_invalid_password_source_configuration(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _, async_url = _upgrade_head(tmp_path, "admin_bootstrap_invalid_config.db")
    password_file = tmp_path / "bootstrap-password.txt"
    password_file.write_text("bootstrap-from-file\n", encoding="utf-8")
    _set_runtime_env(monkeypatch, database_url=async_url)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_EMAIL", "invalid-config@example.com")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD", "bootstrap-password")
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD_FILE", str(password_file))

    with pytest.raises(AdminBootstrapConfigError, match="set only one of"):
        _create_runtime_test_client()


@pytest.mark.asyncio
async def test_startup_bootstrap_requires_email_when_password_is_set(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _, async_url = _upgrade_head(tmp_path, "admin_bootstrap_missing_email.db")
    _set_runtime_env(monkeypatch, database_url=async_url)
    monkeypatch.setenv("BOOTSTRAP_ADMIN_PASSWORD", "bootstrap-password")

    with pytest.raises(AdminBootstrapConfigError, match="BOOTSTRAP_ADMIN_EMAIL is required"):
        _create_runtime_test_client()
