from __future__ import annotations

import logging
from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.tool import Tool
from models.user import User
from models.schemas.tool import ToolCreateSchema, ToolOutSchema
from utils.decorators import jwt_required
from utils.errors import AccountNotFound

logger = logging.getLogger(__name__)

bp = Blueprint("tools", __name__)

tool_create_schema = ToolCreateSchema()
tool_out_schema = ToolOutSchema()


@bp.post("/tools")
@jwt_required()
def create_tool():
    """
    Submit a new tool listing
    ---
    tags:
      - Tools
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            name: { type: string }
            logo: { type: string }
            category:
              type: array
              items: { type: string }
            short_description: { type: string, maxLength: 500 }
            full_detail: { type: string, maxLength: 5000 }
            tool_images:
              type: array
              maxItems: 5
              items: { type: string }
            tags:
              type: array
              items: { type: string }
            links:
              type: object
              properties:
                telegram: { type: string }
                x: { type: string }
                website: { type: string }
    responses:
      201:
        description: Created
      401:
        description: Unauthorized
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        abort(400, description="Request body must be a JSON object.")
    data = tool_create_schema.load(payload)

    author = storage.get(User, g.current_user_id)
    if not author:
        raise AccountNotFound()

    tool = Tool(
        author_id=author.id,
        name=data["name"],
        logo=data["logo"],
        short_description=data.get("short_description", ""),
        full_detail=data.get("full_detail", ""),
        category=data["category"],
        tool_images=data.get("tool_images", []),
        tags=data.get("tags", []),
        links=data["links"],
    )
    storage.new(tool)
    storage.save()
    logger.info("User %s created tool %s", author.id, tool.id)

    return jsonify({"message": "Tool created successfully.", "data": tool_out_schema.dump(tool)}), 201
