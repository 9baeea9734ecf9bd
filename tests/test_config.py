import pytest

from app.config import DEFAULT_HIVE_NODES, Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in (
        "TELEGRAM_BOT_TOKEN",
        "HIVE_NODES",
        "REPUTATION_API_URL",
        "HISTORY_WINDOW_DAYS",
        "REWARD_APP_ACCOUNT",
    ):
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    settings = Settings()
    assert settings.telegram_bot_token is None
    assert settings.hive_nodes == DEFAULT_HIVE_NODES
    assert settings.history_window_days == 30
    assert settings.reward_app_account == "reward.app"
    assert settings.reputation_api_url is None


def test_hive_nodes_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
    monkeypatch.setenv("HIVE_NODES", "https://a.test, https://b.test,")

    settings = Settings()

    assert settings.telegram_bot_token == "123:abc"
    assert settings.hive_nodes == ["https://a.test", "https://b.test"]


def test_env_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("HISTORY_WINDOW_DAYS=7\nREWARD_APP_ACCOUNT=other.app\n")

    settings = Settings()

    assert settings.history_window_days == 7
    assert settings.reward_app_account == "other.app"
