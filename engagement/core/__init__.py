"""Core module for exceptions, token validation and telemetry."""

from engagement.core.exceptions import (
    BadRequestError,
    EngagementAPIError,
    InternalServerError,
    NotFoundError,
    UnauthorizedError,
)
from engagement.core.telemetry import get_tracer, setup_all_instrumentation, setup_telemetry

__all__ = [
    "BadRequestError",
    "EngagementAPIError",
    "InternalServerError",
    "NotFoundError",
    "UnauthorizedError",
    "get_tracer",
    "setup_telemetry",
    "setup_all_instrumentation",
]
