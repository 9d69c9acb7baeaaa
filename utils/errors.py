"""
Authentication error taxonomy.

Every error is a deterministic validation outcome: it is rendered by the
error handlers in api/errors.py and never retried.
"""
from __future__ import annotations


class AuthError(Exception):
    """Base class: carries the envelope code, HTTP status and client message."""

    code = "UNAUTHORIZED"
    status = 401
    default_message = "Unauthorized request."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredential(AuthError):
    code = "MISSING_CREDENTIAL"
    status = 400
    default_message = "Credentials are required."


class InvalidCredential(AuthError):
    # One message for unknown email and wrong password
    code = "INVALID_CREDENTIAL"
    default_message = "The email or password is incorrect."


class TokenExpired(AuthError):
    code = "TOKEN_EXPIRED"
    default_message = "The token has expired."


class TokenMalformed(AuthError):
    code = "TOKEN_INVALID"
    default_message = "The token is invalid."


class TokenRevoked(AuthError):
    """Signature is valid but the token no longer matches the stored one."""

    code = "TOKEN_REVOKED"
    default_message = "The refresh token is invalid."


class AccountNotFound(AuthError):
    code = "NOT_FOUND"
    status = 404
    default_message = "User not found."
