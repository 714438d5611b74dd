"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT signing/verification via PyJWT (TokenCodec)
- JTI generation for token identifiers
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Mapping

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

ph = PasswordHasher()

# verified against when the email is unknown, so both login failures cost one argon2 verify
DUMMY_HASH = ph.hash("storefront-dummy-password")

ACCESS = "access"
REFRESH = "refresh"


class TokenExpired(Exception):
    """Signature is valid but ``exp`` has passed."""


class TokenInvalid(Exception):
    """Malformed token, bad signature, or wrong token type."""


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    return ph.check_needs_rehash(password_hash)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """
    Signs and verifies access and refresh tokens.

    Access and refresh tokens use different secrets, so one can never be
    replayed as the other even before the ``type`` claim is checked.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(hours=12),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        issuer: str = "storefront-api",
    ):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh tokens need distinct secrets")
        self.secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self.ttls = {ACCESS: access_ttl, REFRESH: refresh_ttl}
        self.algorithm = algorithm
        self.issuer = issuer

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "TokenCodec":
        return cls(
            access_secret=config["JWT_ACCESS_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            access_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "storefront-api"),
        )

    def sign(self, claims: Dict[str, Any], secret: str, ttl: timedelta) -> str:
        now = _now()
        payload = {
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": generate_jti(),
        }
        payload.update(claims)
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def verify(self, token: str, secret: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT.
        Raises TokenExpired on a past ``exp``, TokenInvalid on anything else.
        """
        try:
            return jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["sub", "exp", "iat", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(f"Invalid token: {exc}") from exc

    def issue(self, kind: str, subject: str) -> str:
        return self.sign({"sub": str(subject), "type": kind}, self.secrets[kind], self.ttls[kind])

    def decode(self, kind: str, token: str) -> Dict[str, Any]:
        decoded = self.verify(token, self.secrets[kind])
        if decoded.get("type") != kind:
            raise TokenInvalid("Wrong token type")
        return decoded

    @property
    def access_ttl(self) -> timedelta:
        return self.ttls[ACCESS]

    @property
    def refresh_ttl(self) -> timedelta:
        return self.ttls[REFRESH]
