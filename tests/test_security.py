"""
Unit tests for TokenAuthority and password hashing (utils/security.py).

The authority runs against an in-memory account store, so every test here
exercises token issuance, verification and the single-session rules
without a database.
"""

import datetime

import pytest

from api.config import TestingConfig
from utils.errors import (
    AccountNotFound,
    MissingCredential,
    TokenExpired,
    TokenMalformed,
    TokenRevoked,
)
from utils.security import TokenAuthority, hash_password, verify_password

ACCESS_SECRET = TestingConfig.JWT_ACCESS_SECRET
REFRESH_SECRET = TestingConfig.JWT_REFRESH_SECRET


class TestPasswords:
    def test_hash_then_verify(self):
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed) is True

    def test_wrong_password_is_false(self):
        assert verify_password("nope", hash_password("s3cret-pass")) is False

    def test_garbage_hash_is_false(self):
        assert verify_password("anything", "not-an-argon2-hash") is False


class TestConstruction:
    def test_secrets_must_differ(self, memory_store):
        with pytest.raises(ValueError):
            TokenAuthority(memory_store, access_secret="same", refresh_secret="same")

    def test_secrets_required(self, memory_store):
        with pytest.raises(ValueError):
            TokenAuthority(memory_store, access_secret="", refresh_secret="x")


class TestIssueAndVerify:
    def test_access_token_carries_identifier(self, authority, make_account):
        account = make_account()
        access, _ = authority.issue_pair(account)

        claims = authority.verify(access, ACCESS_SECRET)

        assert claims["sub"] == account.id
        assert claims["type"] == "access"
        assert "email" not in claims

    def test_refresh_token_carries_identifier_and_email(self, authority, make_account):
        account = make_account(email="a@b.com")
        _, refresh = authority.issue_pair(account)

        claims = authority.verify_refresh(refresh)

        assert claims["sub"] == account.id
        assert claims["email"] == "a@b.com"
        assert claims["exp"] > claims["iat"]

    def test_issue_pair_does_not_persist(self, authority, make_account, memory_store):
        account = make_account()
        authority.issue_pair(account)

        assert account.refresh_token is None
        assert memory_store.saves == 0

    def test_issue_access_matches_account(self, authority, make_account):
        account = make_account()
        assert authority.verify_access(authority.issue_access(account))["sub"] == account.id

    def test_pairs_issued_back_to_back_differ(self, authority, make_account):
        account = make_account()
        first = authority.issue_pair(account)
        second = authority.issue_pair(account)
        assert first[0] != second[0]
        assert first[1] != second[1]

    def test_refresh_token_rejected_by_access_secret(self, authority, make_account):
        account = make_account()
        _, refresh = authority.issue_pair(account)

        with pytest.raises(TokenMalformed):
            authority.verify(refresh, ACCESS_SECRET)

    def test_token_signed_with_access_secret_rejected_as_refresh(self, authority, make_token):
        forged = make_token(secret=ACCESS_SECRET, token_type="refresh")

        with pytest.raises(TokenMalformed):
            authority.verify(forged, REFRESH_SECRET)

    def test_access_token_cannot_be_used_as_refresh(self, authority, make_account):
        account = make_account()
        access, _ = authority.issue_pair(account)

        with pytest.raises(TokenMalformed):
            authority.verify_refresh(access)

    def test_wrong_type_claim_rejected(self, authority, make_token):
        token = make_token(secret=REFRESH_SECRET, token_type="access")

        with pytest.raises(TokenMalformed):
            authority.verify_refresh(token)

    def test_expired_token(self, authority, make_token):
        token = make_token(exp_minutes=-5)

        with pytest.raises(TokenExpired):
            authority.verify_refresh(token)

    def test_expired_access_from_authority(self, memory_store, make_account):
        short = TokenAuthority(
            memory_store,
            access_secret=ACCESS_SECRET,
            refresh_secret=REFRESH_SECRET,
            access_expires=datetime.timedelta(seconds=-30),
        )
        access = short.issue_access(make_account())

        with pytest.raises(TokenExpired, match="access token has expired"):
            short.verify_access(access)

    def test_garbage_is_malformed(self, authority):
        with pytest.raises(TokenMalformed):
            authority.verify_access("not-a-jwt")

    def test_foreign_issuer_rejected(self, authority, make_token):
        token = make_token(issuer="someone-else")

        with pytest.raises(TokenMalformed):
            authority.verify_refresh(token)


class TestSessionLifecycle:
    def test_start_session_persists_refresh_token(self, authority, make_account, memory_store):
        account = make_account()

        _, refresh = authority.start_session(account)

        assert account.refresh_token == refresh
        assert memory_store.saves == 1

    def test_refresh_returns_access_token_for_same_account(self, authority, make_account):
        account = make_account()
        _, refresh = authority.start_session(account)

        access = authority.refresh(refresh)

        assert authority.verify_access(access)["sub"] == account.id

    def test_refresh_never_rotates_stored_token(self, authority, make_account, memory_store):
        account = make_account()
        _, refresh = authority.start_session(account)
        saves = memory_store.saves

        authority.refresh(refresh)
        authority.refresh(refresh)

        assert account.refresh_token == refresh
        assert memory_store.saves == saves

    def test_second_login_invalidates_first(self, authority, make_account):
        account = make_account(email="a@b.com")
        _, first = authority.start_session(account)
        _, second = authority.start_session(account)

        with pytest.raises(TokenRevoked):
            authority.refresh(first)
        assert authority.refresh(second)

    def test_revoke_invalidates_unexpired_token(self, authority, make_account):
        account = make_account()
        _, refresh = authority.start_session(account)

        authority.revoke(account)

        assert account.refresh_token is None
        with pytest.raises(TokenRevoked):
            authority.refresh(refresh)

    def test_logout_clears_and_rejects_reuse(self, authority, make_account):
        account = make_account()
        _, refresh = authority.start_session(account)

        assert authority.logout(refresh) is account
        assert account.refresh_token is None
        with pytest.raises(TokenRevoked):
            authority.logout(refresh)

    def test_valid_signature_but_never_stored(self, authority, make_account):
        account = make_account()
        _, unsaved = authority.issue_pair(account)

        with pytest.raises(TokenRevoked):
            authority.refresh(unsaved)

    def test_unknown_account(self, authority, make_token):
        token = make_token(sub="00000000-0000-4000-8000-000000000000")

        with pytest.raises(AccountNotFound):
            authority.refresh(token)

    @pytest.mark.parametrize("presented", ["", None])
    def test_missing_refresh_token(self, authority, presented):
        with pytest.raises(MissingCredential, match="refresh token is required"):
            authority.refresh(presented)

    def test_non_string_token_is_malformed(self, authority):
        with pytest.raises(TokenMalformed):
            authority.refresh(12345)
