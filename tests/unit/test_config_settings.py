import pytest

from guard_connector.config import settings
from guard_connector.config.settings import ConnectorConfig, load_settings
from guard_connector.core.guard.exceptions import ConfigurationError

GUARD_ENV = (
    "GUARD_BASE_URL",
    "GUARD_DIRECTORY_ID",
    "GUARD_API_TOKEN",
    "GUARD_DEFAULT_PAGE_SIZE",
    "GUARD_REQUEST_TIMEOUT",
    "GUARD_IGNORE_GROUPS",
    "GUARD_UNIQUE_CHECK_GROUP_DISPLAY_NAME",
    "GUARD_STRICT_SCHEMA",
)


@pytest.fixture
def secrets_dir(monkeypatch, tmp_path):
    """Point /run/secrets at an empty temporary directory and clear GUARD_* vars."""
    for name in GUARD_ENV:
        monkeypatch.delenv(name, raising=False)

    monkeypatch.setattr(settings, "SECRETS_DIR", tmp_path)
    return tmp_path


def test_load_settings_from_environment(monkeypatch, secrets_dir):
    monkeypatch.setenv("GUARD_DIRECTORY_ID", "dir-42")
    monkeypatch.setenv("GUARD_API_TOKEN", "env-token")
    monkeypatch.setenv("GUARD_DEFAULT_PAGE_SIZE", "25")
    monkeypatch.setenv("GUARD_IGNORE_GROUPS", "Site-Admins, service-accounts ,,")
    monkeypatch.setenv("GUARD_UNIQUE_CHECK_GROUP_DISPLAY_NAME", "true")

    cfg = load_settings()

    assert cfg.base_url == "https://api.atlassian.com"
    assert cfg.scim_base_url == "https://api.atlassian.com/scim/directory/dir-42"
    assert cfg.api_token == "env-token"
    assert cfg.default_page_size == 25
    assert cfg.ignore_groups == frozenset({"site-admins", "service-accounts"})
    assert cfg.unique_check_group_display_name is True
    assert cfg.strict_schema is False
    assert cfg.request_timeout == 10


def test_api_token_prefers_run_secrets(monkeypatch, secrets_dir):
    (secrets_dir / "guard_api_token").write_text("file-token\n")
    monkeypatch.setenv("GUARD_DIRECTORY_ID", "dir-42")
    monkeypatch.setenv("GUARD_API_TOKEN", "env-token")

    assert load_settings().api_token == "file-token"


def test_blank_secret_file_falls_back_to_environment(monkeypatch, secrets_dir):
    (secrets_dir / "guard_api_token").write_text("  \n")
    monkeypatch.setenv("GUARD_DIRECTORY_ID", "dir-42")
    monkeypatch.setenv("GUARD_API_TOKEN", "env-token")

    assert load_settings().api_token == "env-token"


def test_missing_token_is_a_configuration_error(monkeypatch, secrets_dir):
    monkeypatch.setenv("GUARD_DIRECTORY_ID", "dir-42")

    with pytest.raises(ConfigurationError, match="GUARD_API_TOKEN"):
        load_settings()


def test_missing_directory_is_a_configuration_error(monkeypatch, secrets_dir):
    monkeypatch.setenv("GUARD_API_TOKEN", "env-token")

    with pytest.raises(ConfigurationError, match="GUARD_DIRECTORY_ID"):
        load_settings()


@pytest.mark.parametrize("name, value", [
    ("GUARD_DEFAULT_PAGE_SIZE", "many"),
    ("GUARD_DEFAULT_PAGE_SIZE", "0"),
    ("GUARD_REQUEST_TIMEOUT", "-1"),
])
def test_invalid_numbers_are_rejected(monkeypatch, secrets_dir, name, value):
    monkeypatch.setenv("GUARD_DIRECTORY_ID", "dir-42")
    monkeypatch.setenv("GUARD_API_TOKEN", "env-token")
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError):
        load_settings()


def test_token_is_hidden_from_repr():
    cfg = ConnectorConfig(directory_id="dir-1", api_token="super-secret")
    assert "super-secret" not in repr(cfg)


def test_ignored_groups_are_case_insensitive():
    cfg = ConnectorConfig(ignore_groups=frozenset({"Service-Accounts"}))
    assert cfg.is_ignored_group("SERVICE-ACCOUNTS")
    assert not cfg.is_ignored_group("Engineering")
    assert not cfg.is_ignored_group(None)
