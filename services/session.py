"""
Session Manager: credential checks, token issuance, verification and
refresh-token rotation.

A user holds at most one accepted refresh token (``User.refresh_token``).
Register and login overwrite it, which revokes whatever was issued before;
logout clears it. Access tokens are never stored.
"""
from __future__ import annotations

import hmac

from repos.user_repo import UserRepo
from models.user import Role, User
from services.errors import (
    Conflict,
    Expired,
    Forbidden,
    InvalidCredentials,
    InvalidSignature,
    Revoked,
    Unauthenticated,
    Validation,
    store_errors,
)
from services.identity import Identity, SessionTokens
from utils.logging import get_logger
from utils.security import (
    ACCESS,
    REFRESH,
    DUMMY_HASH,
    TokenCodec,
    TokenExpired,
    TokenInvalid,
    hash_password,
    needs_rehash,
    verify_password,
)

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


class SessionManager:
    def __init__(self, users: UserRepo, codec: TokenCodec):
        self.users = users
        self.codec = codec

    def _issue(self, user: User) -> SessionTokens:
        access = self.codec.issue(ACCESS, user.id)
        refresh = self.codec.issue(REFRESH, user.id)
        user.refresh_token = refresh
        return SessionTokens(user=user, access_token=access, refresh_token=refresh)

    def register(self, name: str, email: str, password: str) -> SessionTokens:
        if not name or not email:
            raise Validation("name and email are required")
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise Validation(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")

        with store_errors(self.users.db):
            if self.users.find_by_email(email):
                raise Conflict("Email already registered")
            user = self.users.create(
                name=name,
                email=email,
                password_hash=hash_password(password),
                role=Role.USER,
            )
            tokens = self._issue(user)
            self.users.save(user)

        logger.info("Registered user %s", user.id)
        return tokens

    def login(self, email: str, password: str) -> SessionTokens:
        with store_errors(self.users.db):
            user = self.users.find_by_email(email) if email else None
            matched = verify_password(password or "", user.password_hash if user else DUMMY_HASH)
            # same error whichever half was wrong
            if not user or not matched:
                logger.warning("Failed login attempt")
                raise InvalidCredentials()
            if needs_rehash(user.password_hash):
                user.password_hash = hash_password(password)
            tokens = self._issue(user)
            self.users.save(user)

        logger.info("User %s logged in", user.id)
        return tokens

    def verify(self, access_token: str | None) -> Identity:
        if not access_token:
            raise Unauthenticated("Unauthorized request")
        try:
            decoded = self.codec.decode(ACCESS, access_token)
        except TokenExpired:
            raise Expired()
        except TokenInvalid:
            raise Unauthenticated("Invalid access token")

        with store_errors(self.users.db):
            user = self.users.find_by_id(decoded["sub"])
        if not user:
            raise Unauthenticated("Invalid access token")
        return Identity.of(user)

    def refresh(self, refresh_token: str | None) -> str:
        """Exchange the stored refresh token for a new access token."""
        if not refresh_token:
            raise Unauthenticated("Refresh token not found")
        try:
            decoded = self.codec.decode(REFRESH, refresh_token)
        except TokenExpired:
            raise Revoked("Refresh token expired, sign in again")
        except TokenInvalid:
            raise InvalidSignature()

        with store_errors(self.users.db):
            user = self.users.find_by_id(decoded["sub"])
        stored = user.refresh_token if user else None
        if not stored or not hmac.compare_digest(stored.encode(), refresh_token.encode()):
            logger.warning("Rejected superseded refresh token for %s", decoded["sub"])
            raise Revoked()

        logger.info("Issued access token from refresh for %s", user.id)
        return self.codec.issue(ACCESS, user.id)

    def logout(self, identity: Identity | None, refresh_token: str | None = None) -> None:
        """
        Revoke the stored refresh token.

        The caller is identified by a valid access token or, when that is
        missing or expired, by the refresh token itself; the latter only
        revokes if it is still the stored one. Anything else is a no-op.
        """
        user_id = identity.id if identity is not None else None
        if user_id is None and refresh_token:
            try:
                user_id = self.codec.decode(REFRESH, refresh_token)["sub"]
            except (TokenExpired, TokenInvalid):
                return
        if user_id is None:
            return

        with store_errors(self.users.db):
            user = self.users.find_by_id(user_id)
            if user is None or user.refresh_token is None:
                return
            if identity is None and not hmac.compare_digest(user.refresh_token.encode(), refresh_token.encode()):
                return
            user.refresh_token = None
            self.users.save(user)
        logger.info("User %s logged out", user_id)

    def change_password(self, identity: Identity, current_password: str, new_password: str) -> SessionTokens:
        """
        Replace the password and open a fresh session. The new refresh token
        overwrites the stored one, so every other session is revoked.
        """
        if not new_password or len(new_password) < MIN_PASSWORD_LENGTH:
            raise Validation(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
        with store_errors(self.users.db):
            user = self.current_user(identity)
            if not verify_password(current_password or "", user.password_hash):
                raise InvalidCredentials("Current password is incorrect")
            user.password_hash = hash_password(new_password)
            tokens = self._issue(user)
            self.users.save(user)
        logger.info("User %s changed password", user.id)
        return tokens

    def require_role(self, identity: Identity, *roles: Role) -> Identity:
        if identity is None:
            raise Unauthenticated()
        if identity.role not in roles:
            raise Forbidden("Admin access required" if roles == (Role.ADMIN,) else None)
        return identity

    def current_user(self, identity: Identity) -> User:
        with store_errors(self.users.db):
            user = self.users.find_by_id(identity.id)
        if user is None:
            raise Unauthenticated("Invalid access token")
        return user

    def update_profile(self, identity: Identity, name: str | None = None, email: str | None = None) -> User:
        if name is not None and not name.strip():
            raise Validation("name cannot be empty")
        with store_errors(self.users.db):
            user = self.current_user(identity)
            if email is not None and email.strip().lower() != user.email:
                if self.users.find_by_email(email):
                    raise Conflict("Email already exists")
                user.email = email.strip().lower()
            if name is not None:
                user.name = name.strip()
            self.users.save(user)
        logger.info("User %s updated profile", user.id)
        return user
