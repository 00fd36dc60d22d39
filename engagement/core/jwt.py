"""Bearer token validation for tokens issued by the auth service."""

import logging
from dataclasses import dataclass
from uuid import UUID

import jwt
from cachetools import TTLCache
from jwt import PyJWKClient, PyJWKClientError

from engagement.config import settings

logger = logging.getLogger(__name__)

# Cache for the JWKS client with TTL
_jwks_cache: TTLCache = TTLCache(maxsize=10, ttl=settings.JWT_JWKS_CACHE_TTL)


@dataclass
class TokenIdentity:
    """Identity extracted from access token claims."""

    user_id: UUID
    username: str | None = None


class JWTValidationError(Exception):
    """Raised when token validation fails."""

    pass


def _get_jwks_client(jwks_url: str) -> PyJWKClient:
    """Get or create a cached JWKS client."""
    if jwks_url in _jwks_cache:
        return _jwks_cache[jwks_url]

    client = PyJWKClient(jwks_url, cache_keys=True)
    _jwks_cache[jwks_url] = client
    return client


def _signing_key(token: str) -> tuple[object, list[str]]:
    """Resolve the key and algorithms used to verify a token."""
    if settings.JWT_JWKS_URL:
        jwks_client = _get_jwks_client(settings.JWT_JWKS_URL)
        signing_key = jwks_client.get_signing_key_from_jwt(token)
        return signing_key.key, ["RS256", "ES256"]

    return settings.JWT_SECRET_KEY, [settings.JWT_ALGORITHM]


def decode_access_token(token: str) -> dict:
    """
    Validate an access token and return its claims.

    Args:
        token: The encoded JWT

    Returns:
        The decoded claims

    Raises:
        JWTValidationError: If the token is invalid
    """
    try:
        key, algorithms = _signing_key(token)
        return jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options={
                "require": ["sub", "exp"],
                "verify_aud": settings.JWT_AUDIENCE is not None,
                "verify_iss": settings.JWT_ISSUER is not None,
            },
        )
    except PyJWKClientError as e:
        logger.warning(f"Failed to get signing key from JWKS: {e}")
        raise JWTValidationError(f"Failed to get signing key: {e}") from e
    except jwt.ExpiredSignatureError:
        logger.debug("Token has expired")
        raise JWTValidationError("Token has expired")
    except jwt.InvalidAudienceError:
        logger.warning("Token has invalid audience")
        raise JWTValidationError("Token has invalid audience")
    except jwt.InvalidIssuerError:
        logger.warning("Token has invalid issuer")
        raise JWTValidationError("Token has invalid issuer")
    except jwt.PyJWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise JWTValidationError(f"Token validation failed: {e}") from e


async def get_identity_from_token(token: str) -> TokenIdentity:
    """
    Resolve the caller identity from a bearer token.

    The ``sub`` claim carries the user's UUID.

    Raises:
        JWTValidationError: If the token is invalid or ``sub`` is not a UUID
    """
    claims = decode_access_token(token)

    try:
        user_id = UUID(str(claims["sub"]))
    except ValueError as e:
        raise JWTValidationError("Token subject is not a valid user id") from e

    return TokenIdentity(user_id=user_id, username=claims.get("username"))
