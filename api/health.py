from flask import Blueprint

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            service:
              type: string
              example: tool-directory-api
    """
    return {"status": "ok", "service": "tool-directory-api", "version": "1.0.0"}, 200
