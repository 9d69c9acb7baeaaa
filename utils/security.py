"""
security helpers:
- Argon2 password hashing via argon2-cffi
- TokenAuthority: issues, verifies and revokes access/refresh JWTs (PyJWT)
- JTI generation for token identifiers

Each account holds at most one valid refresh token. Login overwrites it,
logout clears it, and refreshing an access token leaves it untouched.
"""
from __future__ import annotations

import hmac
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

from flask import current_app

from utils.errors import (
    AccountNotFound,
    MissingCredential,
    TokenExpired,
    TokenMalformed,
    TokenRevoked,
)

logger = logging.getLogger(__name__)

ph = PasswordHasher()

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenAuthority:
    """
    Issues and validates the access/refresh token pair for an account.

    The authority does no I/O of its own beyond the account store, which is
    consumed through ``find_by_identifier(id)`` and ``save(account)`` only.
    """

    def __init__(
        self,
        store,
        access_secret: str,
        refresh_secret: str,
        access_expires: timedelta = timedelta(minutes=15),
        refresh_expires: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        issuer: str = "tool-directory-api",
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("access and refresh secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("access and refresh secrets must differ")
        self.store = store
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm
        self.issuer = issuer

    @classmethod
    def from_config(cls, config, store) -> "TokenAuthority":
        return cls(
            store,
            access_secret=config["JWT_ACCESS_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            access_expires=config["JWT_ACCESS_EXPIRES"],
            refresh_expires=config["JWT_REFRESH_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "tool-directory-api"),
        )

    # -- issuing ---------------------------------------------------------

    def _encode(self, claims: Dict[str, Any], secret: str, expires: timedelta) -> str:
        now = _now()
        payload = {
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + expires).timestamp()),
            "jti": generate_jti(),
            **claims,
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def issue_access(self, account) -> str:
        """Access token: identifier only, short expiry."""
        return self._encode(
            {"sub": str(account.id), "type": ACCESS},
            self.access_secret,
            self.access_expires,
        )

    def issue_refresh(self, account) -> str:
        return self._encode(
            {"sub": str(account.id), "email": account.email, "type": REFRESH},
            self.refresh_secret,
            self.refresh_expires,
        )

    def issue_pair(self, account) -> Tuple[str, str]:
        """Return (access_token, refresh_token). The caller persists the refresh token."""
        return self.issue_access(account), self.issue_refresh(account)

    # -- verification ----------------------------------------------------

    def verify(self, token: str, secret: str, expected_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Decode and validate a JWT against ``secret``.
        Raises TokenExpired past expiry and TokenMalformed on a bad signature,
        bad structure or a ``type`` claim other than ``expected_type``.
        """
        kind = expected_type or "authentication"
        try:
            decoded = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired(f"The {kind} token has expired.")
        except jwt.InvalidTokenError:
            raise TokenMalformed(f"The {kind} token is invalid.")

        if expected_type and decoded.get("type") != expected_type:
            raise TokenMalformed(f"The {kind} token is invalid.")
        return decoded

    def verify_access(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.access_secret, ACCESS)

    def verify_refresh(self, token: str) -> Dict[str, Any]:
        return self.verify(token, self.refresh_secret, REFRESH)

    # -- session lifecycle -----------------------------------------------

    def start_session(self, account) -> Tuple[str, str]:
        """Issue a pair and store the refresh token, replacing any earlier one."""
        access_token, refresh_token = self.issue_pair(account)
        account.refresh_token = refresh_token
        self.store.save(account)
        return access_token, refresh_token

    def authenticate_refresh(self, presented: Optional[str]):
        """
        Resolve a presented refresh token to its account.
        A token that verifies but differs from the stored value raises TokenRevoked.
        """
        if not presented:
            raise MissingCredential("The refresh token is required.")

        claims = self.verify_refresh(presented)
        account = self.store.find_by_identifier(claims["sub"])
        if account is None:
            raise AccountNotFound()

        stored = account.refresh_token
        if not stored or not hmac.compare_digest(stored.encode(), presented.encode()):
            logger.warning("Rejected stale refresh token for user %s", account.id)
            raise TokenRevoked()
        return account

    def refresh(self, presented: Optional[str]) -> str:
        """New access token for a live refresh token. The refresh token is not rotated."""
        account = self.authenticate_refresh(presented)
        return self.issue_access(account)

    def revoke(self, account) -> None:
        account.refresh_token = None
        self.store.save(account)

    def logout(self, presented: Optional[str]):
        account = self.authenticate_refresh(presented)
        self.revoke(account)
        return account


def get_token_authority() -> TokenAuthority:
    """The authority bound to the current Flask app (see create_app)."""
    return current_app.extensions["token_authority"]
