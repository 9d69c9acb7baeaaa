"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- GET  /auth/check-session
- POST /auth/refresh
- POST /auth/logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens, each signed with its own secret
- Stores the current refresh token on the user row; a new login overwrites it and logout clears it
- Refresh returns a new access token and keeps the refresh token as it is
"""
from __future__ import annotations

import logging
from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.user import User
from models.user_store import UserStore
from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema

from utils.decorators import jwt_required
from utils.errors import AccountNotFound, InvalidCredential, MissingCredential
from utils.security import hash_password, verify_password, get_token_authority

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()


def _token_response(access_token: str, refresh_token: str, user: User, status: int = 200, message: str | None = None):
    authority = get_token_authority()
    body = {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "expires_in": int(authority.access_expires.total_seconds()),
        "data": user_out_schema.dump(user),
    }
    if message:
        body["message"] = message
    return jsonify(body), status


def _json_body() -> dict:
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object.")
    return payload


def _refresh_token_from_body() -> str | None:
    payload = _json_body()
    return payload.get("refresh_token")


@bp.post("/auth/register")
def register():
    """
    Register a new user and start a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created (returns tokens)
      400:
        description: Missing fields
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = _json_body()
    if not all(payload.get(k) for k in ("username", "email", "password")):
        raise MissingCredential("Username, email, and password are required.")
    data = user_create_schema.load(payload)

    store = UserStore(storage)
    if store.find_by_email(data["email"]):
        abort(409, description="User with this email already exists.")

    user = User(
        username=data["username"],
        email=data["email"],
        password_hash=hash_password(data["password"]),
    )
    access_token, refresh_token = get_token_authority().start_session(user)
    logger.info("Registered user %s", user.id)

    return _token_response(access_token, refresh_token, user, 201, "User registered successfully.")


@bp.post("/auth/login")
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Missing email or password
      401:
        description: Unauthorized
    """
    payload = user_login_schema.load(_json_body())
    email = payload.get("email")
    password = payload.get("password")
    if not email or not password:
        raise MissingCredential("Email and password are required.")

    user = UserStore(storage).find_by_email(email)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt")
        raise InvalidCredential()

    # Overwrites any refresh token from an earlier login
    access_token, refresh_token = get_token_authority().start_session(user)
    logger.info("User %s logged in", user.id)

    return _token_response(access_token, refresh_token, user, 200, "Login successfully.")


@bp.get("/auth/check-session")
@jwt_required()
def check_session():
    """
    Return the user behind the presented access token.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
      404:
        description: User not found
    """
    user = storage.get(User, g.current_user_id)
    if not user:
        raise AccountNotFound()
    return jsonify({"data": user_out_schema.dump(user)}), 200


@bp.post("/auth/refresh")
def refresh():
    """
    Exchange the stored refresh token for a new access token.
    The refresh token itself is returned unchanged.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns a new access token)
      400:
        description: Missing refresh token
      401:
        description: Expired, invalid or revoked refresh token
      404:
        description: User not found
    """
    token = _refresh_token_from_body()
    authority = get_token_authority()
    user = authority.authenticate_refresh(token)
    access_token = authority.issue_access(user)
    logger.info("Issued access token for user %s", user.id)

    return _token_response(access_token, user.refresh_token, user)


@bp.post("/auth/logout")
def logout():
    """
    Logout: clears the stored refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: Logged out
      400:
        description: Missing refresh token
      401:
        description: Expired, invalid or revoked refresh token
    """
    token = _refresh_token_from_body()
    user = get_token_authority().logout(token)
    logger.info("User %s logged out", user.id)

    return jsonify({"message": "Logged out successfully."}), 200
