"""Common API dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from engagement.core.exceptions import BadRequestError, UnauthorizedError
from engagement.core.jwt import JWTValidationError, get_identity_from_token
from engagement.db.repositories import UserRepository
from engagement.db.session import async_session_maker
from engagement.models import User

# Optional HTTP Bearer auth so missing tokens produce our own 401
optional_bearer = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(optional_bearer)],
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency for getting the authenticated user from a bearer token.

    Raises:
        UnauthorizedError: If the token is missing, invalid, or names an
            unknown or inactive user
    """
    if not credentials:
        raise UnauthorizedError("Missing authorization header")

    try:
        identity = await get_identity_from_token(credentials.credentials)
    except JWTValidationError as e:
        raise UnauthorizedError(str(e))

    user = await UserRepository(db).get(identity.user_id)
    if not user or not user.is_active:
        raise UnauthorizedError("Unknown user")

    return user


def parse_id(value: str, resource: str) -> UUID:
    """Parse a path identifier, rejecting malformed ones with 400."""
    try:
        return UUID(value)
    except (TypeError, ValueError):
        raise BadRequestError(f"Valid {resource} ID is required")


# Type aliases for cleaner annotations
DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]
