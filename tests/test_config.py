from innokit.core.config import Settings
from innokit.main import App
from innokit.api.middleware import JwtAuthStage


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "9890")
    monkeypatch.setenv("JWT_SECRET", "s")
    monkeypatch.setenv("JWT_PUBLIC_PATH", "^/public")

    settings = Settings()
    assert settings.port == 9890
    assert settings.jwt_secret == "s"
    assert settings.jwt_public_path == "^/public"
    assert settings.auth_enabled


def test_empty_secret_disables_auth(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "")

    settings = Settings()
    assert settings.jwt_secret is None
    assert not settings.auth_enabled


def test_app_adds_auth_stage_only_with_secret(router):
    assert App(Settings(jwt_secret=None), router).stages == []

    stages = App(Settings(jwt_secret="s", jwt_public_path="^/public"), router).stages
    assert len(stages) == 1
    assert isinstance(stages[0], JwtAuthStage)
    assert stages[0].is_public("/public/test")
    assert not stages[0].is_public("/test")
