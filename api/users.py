from __future__ import annotations

from flask import Blueprint, request, jsonify, g

from api.deps import get_session_manager
from models.schemas.user import UserOutSchema, UserUpdateSchema
from utils.decorators import jwt_required

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()
user_update_schema = UserUpdateSchema()


@bp.get("/users/me")
@jwt_required()
def me():
    """
    Get current user info. - user
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
    user = get_session_manager().current_user(g.identity)
    return jsonify({"data": user_out_schema.dump(user)}), 200


@bp.put("/users/me")
@jwt_required()
def update_me():
    """
    Update own name and/or email. - user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            name: { type: string }
            email: { type: string }
    responses:
      200:
        description: Profile updated
      409:
        description: Email already exists
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_update_schema.load(payload)
    user = get_session_manager().update_profile(g.identity, name=data.get("name"), email=data.get("email"))
    return jsonify({"message": "Profile updated successfully", "data": user_out_schema.dump(user)}), 200
