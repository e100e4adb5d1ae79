"""Tests for signed file download tokens."""

import pytest

from casebridge.models import CaseFile, User, UserRole
from casebridge.services.file_tokens import FileTokenSigner

SECRET = "file-token-test-secret"
NOW = 1_700_000_000


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def signer(clock):
    return FileTokenSigner(SECRET, ttl_seconds=300, clock=clock)


CASE_FILE = CaseFile(id="file-1", case_id="case-1")
OWNER = User(id="user-1", role=UserRole.CLIENT)


def test_issued_token_validates(signer):
    issued = signer.issue(CASE_FILE, OWNER)

    assert issued.expires_at == NOW + 300
    assert signer.validate(issued.token, "file-1", "user-1")


def test_token_layout(signer):
    token = signer.issue(CASE_FILE, OWNER).token

    file_id, user_id, expires_at, signature = token.split(".")
    assert (file_id, user_id, expires_at) == ("file-1", "user-1", str(NOW + 300))
    assert "=" not in signature
    assert "+" not in signature and "/" not in signature
    assert FileTokenSigner.user_id_of(token) == "user-1"


def test_token_expires_after_ttl(signer, clock):
    token = signer.issue(CASE_FILE, OWNER).token

    clock.now = NOW + 300
    assert signer.validate(token, "file-1", "user-1")

    clock.now = NOW + 301
    assert not signer.validate(token, "file-1", "user-1")


def test_custom_ttl(signer, clock):
    issued = signer.issue(CASE_FILE, OWNER, ttl_seconds=10)

    assert issued.expires_at == NOW + 10
    clock.now = NOW + 11
    assert not signer.validate(issued.token, "file-1", "user-1")


def test_token_is_bound_to_file_and_user(signer):
    token = signer.issue(CASE_FILE, OWNER).token

    assert not signer.validate(token, "file-2", "user-1")
    assert not signer.validate(token, "file-1", "user-2")


def test_tampered_expiry_is_rejected(signer):
    file_id, user_id, expires_at, signature = signer.issue(CASE_FILE, OWNER).token.split(".")
    forged = ".".join([file_id, user_id, str(int(expires_at) + 3600), signature])

    assert not signer.validate(forged, "file-1", "user-1")


def test_other_secret_is_rejected(signer, clock):
    other = FileTokenSigner("another-secret", clock=clock)
    token = other.issue(CASE_FILE, OWNER).token

    assert not signer.validate(token, "file-1", "user-1")


@pytest.mark.parametrize("token", [
    "",
    "file-1.user-1",
    "file-1.user-1.123.sig.extra",
    "file-1.user-1.soon.sig",
    "file-1.user-1.-5.sig",
    "file-1.user-1.١٢٣.sig",
    "file-1.user-1.1700000300.sïg",
    None,
])
def test_malformed_tokens_are_rejected(signer, token):
    assert signer.validate(token, "file-1", "user-1") is False


def test_user_id_of_malformed_token():
    assert FileTokenSigner.user_id_of("") is None
    assert FileTokenSigner.user_id_of("a.b.c") is None


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        FileTokenSigner("")
