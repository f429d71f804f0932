"""
Tests for configuration module.
"""

import pytest


class TestFeatureFlags:
    """Feature flags tests."""

    def test_default_features_enabled(self):
        from cestas.config import FeatureFlags

        flags = FeatureFlags()
        assert flags.to_dict() == {"cards": True, "tables": True, "users": True}

    def test_flag_from_env(self, monkeypatch):
        from cestas.config import FeatureFlags

        monkeypatch.setenv("FEATURE_USERS", "false")
        assert FeatureFlags().users is False


class TestSettings:
    """Settings defaults and environment overrides."""

    def test_defaults(self):
        from cestas.config import get_settings

        settings = get_settings()
        assert settings.cache.ttl_ms == 60_000
        assert settings.cache.cards_ttl_ms == 30_000
        assert settings.remote.timeout_seconds == 10.0
        assert settings.avatar_max_bytes == 5 * 1024 * 1024
        assert settings.auth_jwt_algorithm == "HS256"

    def test_env_overrides(self, monkeypatch):
        from cestas.config import get_settings

        monkeypatch.setenv("CACHE_TTL_MS", "1000")
        monkeypatch.setenv("REMOTE_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("APP_ENV", "production")
        get_settings.cache_clear()

        settings = get_settings()
        assert settings.cache.ttl_ms == 1000
        assert settings.remote.timeout_seconds == 2.5
        assert settings.is_production is True

    def test_settings_cached(self):
        from cestas.config import get_settings

        assert get_settings() is get_settings()


class TestExceptions:
    """Exception tests."""

    def test_unauthorized_exception(self):
        from cestas.exceptions import UnauthorizedException

        exc = UnauthorizedException()
        assert exc.status_code == 401
        assert exc.code == "UNAUTHORIZED"

    def test_not_found_exception(self):
        from cestas.exceptions import NotFoundException

        exc = NotFoundException("Card", "123")
        assert exc.status_code == 404
        assert exc.code == "NOT_FOUND"
        assert "Card" in exc.message
        assert exc.details == {"resource_type": "Card", "resource_id": "123"}

    def test_conflict_exception(self):
        from cestas.exceptions import ConflictException

        exc = ConflictException("Já existe um card com esse nome", field="name")
        assert exc.status_code == 409
        assert exc.details == {"field": "name"}

    def test_remote_timeout_exception(self):
        from cestas.exceptions import RemoteTimeoutException

        exc = RemoteTimeoutException("tabelas_card.list", 10.0)
        assert exc.status_code == 504
        assert exc.code == "REMOTE_TIMEOUT"
        assert exc.message == "tabelas_card.list timed out after 10s"

    def test_feature_disabled_exception(self):
        from cestas.exceptions import FeatureDisabledException

        exc = FeatureDisabledException("tables")
        assert exc.status_code == 503
        assert "tables" in exc.message


class TestResult:
    def test_success_to_dict(self):
        from cestas.core.result import Success

        assert Success([1, 2]).to_dict() == {"success": True, "data": [1, 2]}
        assert Success().success is True

    def test_failure_to_dict(self):
        from cestas.core.result import Failure

        failure = Failure("Erro ao reordenar produtos", details=[], code="OPERATION_FAILED")
        assert failure.success is False
        assert failure.to_dict() == {
            "success": False,
            "error": "Erro ao reordenar produtos",
            "code": "OPERATION_FAILED",
            "details": [],
        }

    def test_results_are_frozen(self):
        from dataclasses import FrozenInstanceError

        from cestas.core.result import Success

        with pytest.raises(FrozenInstanceError):
            Success(1).data = 2
