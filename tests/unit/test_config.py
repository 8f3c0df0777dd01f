import pytest

from pixelreel.config.settings import Settings, get_settings
from pixelreel.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.mark.unit
class TestSettings:
    def test_default_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(_env_file=None)
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.identity_mode == "remote"
        assert settings.use_s3 is False
        assert "postgresql" in settings.database_url

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://user:pass@db:5432/mydb")
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.setenv("STRIPE_BASIC_PRICE_ID", "price_b")
        monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "10")
        settings = Settings(_env_file=None)
        assert settings.debug is True
        assert settings.stripe_basic_price_id == "price_b"
        assert settings.rate_limit_per_minute == 10

    def test_price_tiers_skip_unset_ids(self) -> None:
        settings = Settings(_env_file=None, stripe_basic_price_id="price_b")
        assert settings.price_tiers == {"price_b": "basic"}

    def test_missing_webhook_secret_warns(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("STRIPE_WEBHOOK_SECRET", raising=False)
        monkeypatch.setitem(Settings.model_config, "env_file", None)
        with pytest.warns(UserWarning, match="STRIPE_WEBHOOK_SECRET"):
            get_settings()

    def test_jwt_mode_requires_secret(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IDENTITY_MODE", "jwt")
        monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_x")
        monkeypatch.delenv("SUPABASE_JWT_SECRET", raising=False)
        monkeypatch.setitem(Settings.model_config, "env_file", None)
        with pytest.raises(ConfigError, match="SUPABASE_JWT_SECRET"):
            get_settings()

    def test_s3_requires_bucket(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("USE_S3", "true")
        monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_x")
        monkeypatch.delenv("S3_BUCKET", raising=False)
        monkeypatch.setitem(Settings.model_config, "env_file", None)
        with pytest.raises(ConfigError, match="S3_BUCKET"):
            get_settings()
