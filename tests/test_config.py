import pytest

from livescore_notifier.config import Config


def test_defaults(env):
    config = Config()
    assert config.whop_api_key == "test_key"
    assert config.poll_interval == 30
    assert config.dispatch_max_retries == 3
    assert config.test_game_speed == 1.0
    assert config.cron_secret == "cron_secret"


def test_missing_api_key(env):
    env.delenv("WHOP_API_KEY")
    with pytest.raises(ValueError, match="WHOP_API_KEY"):
        Config()


@pytest.mark.parametrize("key,value", [
    ("POLL_INTERVAL", "2"),
    ("POLL_INTERVAL", "soon"),
    ("DISPATCH_MAX_RETRIES", "0"),
    ("TEST_GAME_SPEED", "0"),
])
def test_invalid_values(env, key, value):
    env.setenv(key, value)
    with pytest.raises(ValueError):
        Config()
