from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models import storage
from services.errors import Unavailable

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check, including a round-trip to the database
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database are up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            database:
              type: string
              example: ok
      503:
        description: Database unreachable
    """
    try:
        storage.get_session().execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        storage.rollback()
        raise Unavailable("Database unreachable") from exc
    return {"status": "ok", "database": "ok", "version": "1.0.0"}, 200
