from pathlib import Path
from uuid import UUID

import pytest
from pydantic import ValidationError

from rentline_backend.config import Settings, settings
from rentline_backend.modules.auth import crud as auth_crud
from rentline_backend.modules.auth.models import Profile, RoleSlug

CONFIG_DIR = Path(__file__).resolve().parent.parent / "resources" / "config"


@pytest.mark.parametrize("name", ["test.yaml", "local.yaml"])
def test_shipped_config_files_load(name):
    loaded = Settings.from_yaml(CONFIG_DIR / name)
    assert loaded.database_url.count("://") == 1


def test_test_config_uses_in_memory_sqlite():
    assert settings.database_url == "sqlite+aiosqlite:///:memory:"
    assert settings.app_env == "test"
    assert settings.max_login_attempts == 3


def test_log_level_is_normalised():
    assert Settings(LOG_LEVEL="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(LOG_LEVEL="chatty")


def test_production_needs_a_real_jwt_secret():
    with pytest.raises(ValidationError):
        Settings(APP_ENV="production")
    assert Settings(APP_ENV="production", JWT_SECRET_KEY="s" * 32).app_env == "production"


@pytest.mark.asyncio
async def test_rows_get_an_external_uuid(async_session):
    profile = await auth_crud.create_profile(
        async_session, "uuid@example.com", "s3cret-pass", "Uu Id", RoleSlug.TENANT
    )
    await async_session.commit()

    assert isinstance(profile.uuid, UUID)
    stored = await async_session.get(Profile, profile.id, populate_existing=True)
    assert stored.uuid == profile.uuid
