from organizer.services.access_tokens import issue_access_token, verify_access_token

_SECRET = "test-secret"


def test_issued_token_round_trips_claims() -> None:
    token = issue_access_token(subject="user-1", secret_key=_SECRET, email="parent@example.com")

    claims = verify_access_token(token, _SECRET)

    assert claims is not None
    assert claims.subject == "user-1"
    assert claims.email == "parent@example.com"
    assert claims.role == "authenticated"


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = issue_access_token(subject="user-1", secret_key="other-secret")

    assert verify_access_token(token, _SECRET) is None


def test_expired_token_is_rejected() -> None:
    token = issue_access_token(subject="user-1", secret_key=_SECRET, ttl_minutes=-5)

    assert verify_access_token(token, _SECRET) is None


def test_malformed_tokens_are_rejected() -> None:
    assert verify_access_token("", _SECRET) is None
    assert verify_access_token("no-separator", _SECRET) is None
    assert verify_access_token("abc.déf", _SECRET) is None
