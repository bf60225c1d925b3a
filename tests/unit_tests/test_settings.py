import pytest

from ibcol_api.config.settings import Settings, get_settings, load_settings
from ibcol_api.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch, aws_credentials):
    for name in [
        "FILE_REFERENCE_SECRET",
        "FILE_REFERENCE_PREVIOUS_SECRETS",
        "DEFAULT_LOCALE",
        "SUPPORTED_LOCALES",
        "DEPLOYMENT_MODE",
        "CORS_ALLOW_ORIGINS",
        "ALLOWED_CONTENT_TYPES",
    ]:
        monkeypatch.delenv(name, raising=False)


def test_secret_is_mandatory(clean_env):
    with pytest.raises(ConfigurationError, match="file_reference_secret"):
        load_settings()


def test_blank_secret_is_rejected(clean_env):
    with pytest.raises(ConfigurationError, match="file_reference_secret"):
        load_settings(file_reference_secret="   ")


def test_get_settings_reads_environment(clean_env, monkeypatch):
    monkeypatch.setenv("FILE_REFERENCE_SECRET", "from-env")
    monkeypatch.setenv("SUPPORTED_LOCALES", '["en-US", "zh_HK"]')
    monkeypatch.setenv("SIGNED_URL_EXPIRY_SECONDS", "600")

    settings = get_settings()

    assert settings.file_reference_secret.get_secret_value() == "from-env"
    assert settings.supported_locales == ["en-us", "zh-hk"]
    assert settings.signed_url_expiry_seconds == 600
    assert get_settings() is settings


def test_defaults(clean_env):
    settings = load_settings(file_reference_secret="s")

    assert settings.signed_url_expiry_seconds == 900
    assert settings.max_upload_size_bytes == 500 * 1024 * 1024
    assert settings.default_locale == "en-us"
    assert settings.supported_locales == ["en-us", "zh-hk"]
    assert settings.upload_prefix == "uploads"


def test_default_locale_must_be_supported(clean_env):
    with pytest.raises(ConfigurationError, match="default_locale"):
        load_settings(file_reference_secret="s", default_locale="fr-fr")


def test_invalid_deployment_mode(clean_env):
    with pytest.raises(ConfigurationError, match="deployment_mode"):
        load_settings(file_reference_secret="s", deployment_mode="cloud")


def test_local_dev_defaults_to_moto_server(clean_env, monkeypatch):
    monkeypatch.delenv("AWS_ACCESS_KEY_ID")
    monkeypatch.delenv("AWS_SECRET_ACCESS_KEY")

    settings = Settings(file_reference_secret="s", deployment_mode="local-dev")

    assert settings.aws_endpoint_url == "http://localhost:5000"
    assert settings.aws_access_key_id == "mock"
    assert settings.aws_secret_access_key == "mock"


def test_prod_keeps_ambient_credentials(clean_env, monkeypatch):
    monkeypatch.delenv("AWS_ACCESS_KEY_ID")
    monkeypatch.delenv("AWS_SECRET_ACCESS_KEY")

    settings = Settings(file_reference_secret="s", deployment_mode="aws-prod")

    assert settings.aws_endpoint_url is None
    assert settings.aws_access_key_id is None


def test_file_reference_secrets_current_first(clean_env):
    settings = Settings(file_reference_secret="current", file_reference_previous_secrets=["old", "older"])
    assert settings.file_reference_secrets == ["current", "old", "older"]


def test_secret_is_masked(clean_env):
    settings = Settings(file_reference_secret="super-secret")
    assert "super-secret" not in repr(settings)


def test_list_settings_accept_comma_separated_env(clean_env, monkeypatch):
    monkeypatch.setenv("FILE_REFERENCE_SECRET", "from-env")
    monkeypatch.setenv("SUPPORTED_LOCALES", "en-US, zh_HK")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://ibcol.org,https://www.ibcol.org")
    monkeypatch.setenv("ALLOWED_CONTENT_TYPES", "application/pdf,image/png")
    monkeypatch.setenv("FILE_REFERENCE_PREVIOUS_SECRETS", "old,older")

    settings = get_settings()

    assert settings.supported_locales == ["en-us", "zh-hk"]
    assert settings.cors_allow_origins == ["https://ibcol.org", "https://www.ibcol.org"]
    assert settings.allowed_content_types == ["application/pdf", "image/png"]
    assert settings.file_reference_secrets == ["from-env", "old", "older"]


def test_single_value_list_setting_from_env(clean_env, monkeypatch):
    monkeypatch.setenv("FILE_REFERENCE_SECRET", "from-env")
    monkeypatch.setenv("SUPPORTED_LOCALES", "en-us")

    assert get_settings().supported_locales == ["en-us"]


def test_malformed_json_list_env_is_a_configuration_error(clean_env, monkeypatch):
    monkeypatch.setenv("FILE_REFERENCE_SECRET", "from-env")
    monkeypatch.setenv("SUPPORTED_LOCALES", '["en-us", ')

    with pytest.raises(ConfigurationError, match="supported_locales"):
        get_settings()
