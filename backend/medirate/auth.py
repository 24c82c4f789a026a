"""
MediRate Admin Backend — Identity & Admin Authorization
=========================================================

What:  Extracts the caller's identity from the bearer token and enforces the
       single admin policy shared by every admin-gated route.
How:   `get_current_identity` verifies the JWT with PyJWT and yields an
       `Identity`. `require_admin` combines that identity with an
       `AdminPolicy` built from settings. Both raise application exceptions,
       so the global handlers produce the 401/403 responses.
Who:   Declared as route dependencies; never called from services.

Decision table:
    no token / bad token / no email claim     → AuthenticationError (401)
    email in ADMIN_EMAILS (any case)          → admin
    ADMIN_ROLE present in the `roles` claim   → admin
    otherwise                                 → AuthorizationError (403)
"""

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from medirate.config import Settings, settings
from medirate.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must become our 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller as asserted by the identity provider."""
    email: str
    roles: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class AdminPolicy:
    """
    Who may call admin-gated routes.

    Built once from configuration and handed to `require_admin`; the
    allow-list is stored lower-cased so membership ignores case.
    """
    emails: FrozenSet[str] = field(default_factory=frozenset)
    role: Optional[str] = None

    @classmethod
    def from_settings(cls, config: Settings) -> "AdminPolicy":
        return cls(emails=config.admin_email_set, role=config.admin_role or None)

    @classmethod
    def for_emails(cls, emails: Iterable[str], role: Optional[str] = None) -> "AdminPolicy":
        return cls(emails=frozenset(e.strip().lower() for e in emails if e.strip()), role=role)

    def allows(self, identity: Identity) -> bool:
        if identity.email.lower() in self.emails:
            return True
        return self.role is not None and self.role in identity.roles


def decode_token(token: str, config: Settings = settings) -> dict:
    """Verifies signature, expiry and (when configured) audience and issuer."""
    options = {"verify_aud": config.jwt_audience is not None}
    return jwt.decode(
        token,
        config.jwt_secret_key,
        algorithms=[config.jwt_algorithm],
        audience=config.jwt_audience,
        issuer=config.jwt_issuer,
        options=options,
    )


def identity_from_claims(claims: dict) -> Identity:
    email = claims.get("email") or claims.get("sub")
    if not email or not isinstance(email, str):
        raise AuthenticationError(context={"reason": "missing_email_claim"})

    raw_roles = claims.get("roles") or []
    if isinstance(raw_roles, str):
        raw_roles = [raw_roles]
    role_claim = claims.get("role")
    roles = set(raw_roles)
    if isinstance(role_claim, str):
        roles.add(role_claim)
    return Identity(email=email, roles=frozenset(roles))


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """FastAPI dependency: the verified caller, or a 401."""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(context={"reason": "missing_token"})

    try:
        claims = decode_token(credentials.credentials)
    except jwt.PyJWTError as e:
        logger.info("Rejected bearer token: %s", type(e).__name__)
        raise AuthenticationError(context={"reason": type(e).__name__}) from e

    return identity_from_claims(claims)


def get_admin_policy() -> AdminPolicy:
    return AdminPolicy.from_settings(settings)


async def require_admin(
    identity: Identity = Depends(get_current_identity),
    policy: AdminPolicy = Depends(get_admin_policy),
) -> Identity:
    """
    FastAPI dependency for admin-gated routes.

    Runs before the handler body, so a rejected caller never reaches a
    service and no side effect happens.
    """
    if not policy.allows(identity):
        logger.warning("Admin access denied for %s", identity.email)
        raise AuthorizationError(context={"email": identity.email})
    return identity
