from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, abort, g

from api.deps import get_admin_service
from models.schemas.user import RoleUpdateSchema, UserOutSchema
from utils.decorators import roles_required

MAX_LIMIT = 100

bp = Blueprint("admin", __name__, url_prefix="/admin")

role_update_schema = RoleUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


@bp.get("/stats")
@roles_required(["admin"])
def stats():
    """
    Aggregated counts - admin
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    responses:
      200:
        description: User, product and cart counts
      403:
        description: Not an admin
    """
    data = get_admin_service().stats()
    data["open_cart_value"] = str(data["open_cart_value"])
    return jsonify({"data": data})


@bp.get("/users")
@roles_required(["admin"])
def list_users():
    """
    List all users - admin
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200: { description: OK }
    """
    page, limit = parse_pagination()
    rows, total = get_admin_service().list_users(page, limit)
    return jsonify(
        {
            "data": user_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.put("/users/<user_id>/role")
@roles_required(["admin"])
def update_role(user_id: str):
    """
    Admin-only: set the role of another user.
    Body: { "role": "admin" | "user" }
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: path
         name: user_id
         type: string
         required: true
      -  in: body
         name: body
         schema:
           type: object
           properties:
             role: { type: string, enum: [user, admin] }
    responses:
      200: { description: OK }
      400: { description: Cannot change your own role }
      404: { description: User not found }
      422: { description: Invalid role }
    """
    payload = request.get_json(silent=True) or {}
    data = role_update_schema.load(payload)
    user = get_admin_service().update_user_role(g.identity.id, user_id, data["role"])
    return jsonify(
      {
        "message": "User role updated successfully",
        "data": user_out_schema.dump(user)
      }
    ), 200


@bp.delete("/users/<user_id>")
@roles_required(["admin"])
def delete_user(user_id: str):
    """
    Admin-only: delete a user that holds no cart lines
    ---
    tags:
      - Admin
    security:
      - Bearer: []
    parameters:
      - in: path
        name: user_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      400: { description: Cannot delete your own account }
      404: { description: User not found }
      409: { description: User still owns a non-empty cart }
    """
    get_admin_service().delete_user(g.identity.id, user_id)
    return jsonify({"message": "User deleted successfully", "data": {"deleted_user_id": user_id}}), 200
