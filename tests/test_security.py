from pos_console import security

SECRET = "unit-test-secret"


def test_password_hash_round_trip() -> None:
    hashed = security.hash_password("s3cret!")
    assert hashed != "s3cret!"
    assert security.verify_password("s3cret!", hashed)
    assert not security.verify_password("wrong", hashed)


def test_hashes_are_salted() -> None:
    assert security.hash_password("same") != security.hash_password("same")


def test_session_token_carries_user_id() -> None:
    token = security.sign_session(42, SECRET)
    assert security.verify_session(token, SECRET, max_age=60) == 42


def test_tampered_or_foreign_tokens_are_rejected() -> None:
    token = security.sign_session(42, SECRET)
    forged = "43" + token[2:]
    assert security.verify_session(forged, SECRET) is None
    assert security.verify_session(token, "another-secret") is None
    assert security.verify_session("garbage", SECRET) is None


def test_expired_session_is_rejected() -> None:
    token = security.sign_session(7, SECRET, issued_at=1_000)
    assert security.verify_session(token, SECRET, max_age=60) is None
    assert security.verify_session(token, SECRET) == 7
