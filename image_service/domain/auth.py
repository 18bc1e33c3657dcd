"""
Module d'authentification et d'autorisation.

Ce module fournit la création et la validation des tokens JWT ainsi que le principal utilisé pour
les vérifications de permission (`action:scope`).
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from pydantic import BaseModel, Field

ADMIN_ROLE = "admin"


class Principal(BaseModel):
    """Principal extrait d'un token JWT."""

    sub: str
    permissions: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_permission(self, action: str, scope: str) -> bool:
        """Permission exacte, joker d'action sur le scope, ou rôle admin."""
        if self.has_role(ADMIN_ROLE):
            return True
        granted = set(self.permissions)
        return f"{action}:{scope}" in granted or f"*:{scope}" in granted


def create_access_token(
    secret: str, alg: str, expires_min: int, payload: dict[str, Any]
) -> str:
    """Crée un token JWT d'accès avec expiration."""
    to_encode = payload.copy()
    expire = datetime.now(UTC) + timedelta(minutes=expires_min)
    to_encode.update({"exp": expire})
    token = jwt.encode(to_encode, secret, algorithm=alg)
    return token.decode("utf-8") if isinstance(token, bytes) else token


def decode_token(token: str, secret: str, alg: str) -> Principal | None:
    """Décode et valide un token JWT; None si invalide ou sans sujet."""
    try:
        data = jwt.decode(token, secret, algorithms=[alg])
    except InvalidTokenError:
        return None
    if not data.get("sub"):
        return None
    return Principal(
        sub=str(data["sub"]),
        permissions=list(data.get("permissions") or []),
        roles=list(data.get("roles") or []),
    )
