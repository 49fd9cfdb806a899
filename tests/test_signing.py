from livescore_notifier.utils.signing import create_admin_session_token, verify_admin_session_token

NOW = 1_760_000_000


def test_valid_token_round_trip():
    token = create_admin_session_token("biz_1", "secret", timestamp=NOW)
    assert verify_admin_session_token(token, "secret", now=NOW + 10) == (True, "biz_1")


def test_wrong_secret_rejected():
    token = create_admin_session_token("biz_1", "secret", timestamp=NOW)
    assert verify_admin_session_token(token, "other", now=NOW) == (False, None)


def test_expired_token_rejected():
    token = create_admin_session_token("biz_1", "secret", timestamp=NOW)
    assert verify_admin_session_token(token, "secret", now=NOW + 301) == (False, None)


def test_malformed_tokens_rejected():
    for token in (None, "", "biz_1", "biz_1:abc:sig", ":123:sig"):
        assert verify_admin_session_token(token, "secret", now=NOW) == (False, None)
    assert verify_admin_session_token("biz_1:1:sig", None) == (False, None)
