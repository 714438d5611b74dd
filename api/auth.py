"""
Session routes, thin wrappers over SessionManager:
- POST /auth/register   create the account and open a session
- POST /auth/login      open a session, revoking the previous refresh token
- POST /auth/refresh    trade the refresh token for a new access token
- POST /auth/logout     revoke the refresh token and drop both cookies
- POST /auth/change-password   new password, new session, other sessions revoked

Both tokens travel as SameSite cookies; the access token is echoed in the
body for clients that prefer the Authorization header.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from api.deps import get_session_manager
from models.schemas.user import UserCreateSchema, UserOutSchema, UserLoginSchema, PasswordChangeSchema
from services.identity import SessionTokens
from utils.decorators import jwt_required, optional_identity

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_create_schema = UserCreateSchema()
user_out_schema = UserOutSchema()
user_login_schema = UserLoginSchema()
password_change_schema = PasswordChangeSchema()


def _set_cookie(response, name: str, value: str, max_age: int):
    cfg = current_app.config
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        secure=cfg["COOKIE_SECURE"],
        httponly=cfg["COOKIE_HTTPONLY"],
        samesite=cfg["COOKIE_SAMESITE"],
    )


def _session_response(tokens: SessionTokens, status: int, message: str):
    manager = get_session_manager()
    response = jsonify(
        {
            "message": message,
            "data": user_out_schema.dump(tokens.user),
            "access_token": tokens.access_token,
            "token_type": "bearer",
            "expires_in": int(manager.codec.access_ttl.total_seconds()),
        }
    )
    response.status_code = status
    _set_cookie(response, current_app.config["ACCESS_COOKIE_NAME"], tokens.access_token,
                int(manager.codec.access_ttl.total_seconds()))
    _set_cookie(response, current_app.config["REFRESH_COOKIE_NAME"], tokens.refresh_token,
                int(manager.codec.refresh_ttl.total_seconds()))
    return response


@bp.post("/register")
def register():
    """
    Register a new user and open a session.
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
            name: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created (sets access_token and refresh_token cookies)
      409:
        description: Email already registered
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)
    tokens = get_session_manager().register(data["name"], data["email"], data["password"])
    return _session_response(tokens, 201, "User registered successfully")


@bp.post("/login")
def login():
    """
    Login: open a session and revoke any earlier refresh token
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
        description: OK (returns the access token, sets both cookies)
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    tokens = get_session_manager().login(data["email"], data["password"])
    return _session_response(tokens, 200, "Login successful")


@bp.post("/refresh")
def refresh():
    """
    Exchange the refresh token for a new access token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: false
         schema:
           type: object
           properties:
             refresh_token: { type: string, description: "only needed when the cookie is not sent" }
    responses:
      200:
        description: OK (sets a fresh access_token cookie)
      401:
        description: Missing, invalid or revoked refresh token
    """
    payload = request.get_json(silent=True) or {}
    token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"]) or payload.get("refresh_token")
    manager = get_session_manager()
    access_token = manager.refresh(token)
    expires_in = int(manager.codec.access_ttl.total_seconds())

    response = jsonify(
        {
            "message": "Access token refreshed",
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": expires_in,
        }
    )
    _set_cookie(response, current_app.config["ACCESS_COOKIE_NAME"], access_token, expires_in)
    return response


@bp.post("/logout")
def logout():
    """
    Logout: revoke the stored refresh token and clear both cookies.
    Works with an expired or missing access token; the refresh token
    (cookie or body) then identifies the session to revoke.
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: false
         schema:
           type: object
           properties:
             refresh_token: { type: string, description: "only needed when the cookie is not sent" }
    responses:
      200:
        description: Logged out, both cookies cleared
    """
    cfg = current_app.config
    payload = request.get_json(silent=True) or {}
    refresh_token = request.cookies.get(cfg["REFRESH_COOKIE_NAME"]) or payload.get("refresh_token")
    get_session_manager().logout(optional_identity(), refresh_token=refresh_token)
    response = jsonify({"message": "Logout successful"})
    for name in (cfg["ACCESS_COOKIE_NAME"], cfg["REFRESH_COOKIE_NAME"]):
        response.delete_cookie(name, secure=cfg["COOKIE_SECURE"], httponly=cfg["COOKIE_HTTPONLY"],
                               samesite=cfg["COOKIE_SAMESITE"])
    return response


@bp.post("/change-password")
@jwt_required()
def change_password():
    """
    Change the caller's password; every other session is signed out
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             current_password: { type: string }
             new_password: { type: string }
    responses:
      200:
        description: Password changed (sets fresh access_token and refresh_token cookies)
      401:
        description: Current password is incorrect
      422:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = password_change_schema.load(payload)
    tokens = get_session_manager().change_password(g.identity, data["current_password"], data["new_password"])
    return _session_response(tokens, 200, "Password changed successfully")
