"""Custom HTTP exceptions."""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Exception raised when a resource is not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} with id '{identifier}' not found",
        )


class BadRequestError(HTTPException):
    """Exception raised for bad requests."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class UnauthorizedError(HTTPException):
    """Exception raised for authentication failures."""

    def __init__(self, detail: str = "Authentication required"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        )


class InternalServerError(HTTPException):
    """Exception raised when storage fails unexpectedly."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )


class EngagementAPIError(HTTPException):
    """Exception raised when the engagement API cannot be reached or fails."""

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Engagement API error: {detail}",
        )
        self.upstream_status = status_code
