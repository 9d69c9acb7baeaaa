from __future__ import annotations

import uuid
from flask import Blueprint, jsonify, g, abort

from models import storage
from models.tool import Tool
from models.user import User
from models.schemas.user import UserOutSchema
from utils.decorators import jwt_required
from utils.errors import AccountNotFound

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()


def _current_user() -> User:
    user = storage.get(User, g.current_user_id)
    if not user:
        raise AccountNotFound()
    return user


@bp.get("/users/me")
@jwt_required()
def me():
    """
    Get current user info.
    ---
    tags:
      - Users
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
    return jsonify({"data": user_out_schema.dump(_current_user())}), 200


@bp.get("/users/me/tools/ids")
@jwt_required()
def my_tool_ids():
    """
    IDs of the tools submitted by the current user.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = _current_user()
    session = storage.get_session()
    rows = (
        session.query(Tool.id)
        .filter(Tool.author_id == user.id)
        .order_by(Tool.created_at.desc())
        .all()
    )
    return jsonify({"data": [row.id for row in rows]}), 200


@bp.get("/users/<user_id>")
def get_user(user_id: str):
    """
    Get a user by id.
    ---
    tags:
      - Users
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200:
        description: OK
      400:
        description: Invalid user id
      404:
        description: User not found
    """
    try:
        uuid.UUID(user_id)
    except ValueError:
        abort(400, description="The user id is invalid.")

    user = storage.get(User, user_id)
    if not user:
        raise AccountNotFound()
    return jsonify({"data": user_out_schema.dump(user)}), 200
