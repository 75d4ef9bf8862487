from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.core.cache import InMemoryCacheBackend, NoopCacheBackend, RedisCacheBackend, _build_cache_backend
from app.core.config import Settings
from app.core.enums import CacheBackendEnum


def test_default_secret_key_allowed_in_development() -> None:
    settings = Settings(_env_file=None, app_env="development", secret_key="change-me")
    assert settings.secret_key == "change-me"


def test_default_secret_key_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="production", secret_key="change-me")


def test_placeholder_secret_key_prefix_rejected_in_production() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, app_env="prod", secret_key="change-me-in-production")


def test_custom_secret_key_allowed_in_production() -> None:
    settings = Settings(_env_file=None, app_env="production", secret_key="super-secure-value")
    assert settings.secret_key == "super-secure-value"


def test_unknown_institution_timezone_is_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, institution_timezone="Mars/Olympus_Mons")


def test_institution_timezone_accepts_iana_names() -> None:
    settings = Settings(_env_file=None, institution_timezone="America/Chicago")
    assert settings.institution_timezone == "America/Chicago"


def test_redis_cache_backend_requires_url() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, session_cache_backend="redis")


@pytest.mark.parametrize(
    ("backend", "expected"),
    [
        ("none", NoopCacheBackend),
        ("MEMORY", InMemoryCacheBackend),
        ("Redis", RedisCacheBackend),
    ],
)
def test_cache_backend_selection(backend: str, expected: type) -> None:
    settings = Settings(
        _env_file=None,
        session_cache_backend=backend,
        redis_url="redis://localhost:6379/0",
    )

    assert settings.session_cache_backend == CacheBackendEnum(backend.lower())
    assert isinstance(_build_cache_backend(settings), expected)
