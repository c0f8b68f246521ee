"""Service layer for sketchctl.

Each service wraps one group of sketch API endpoints.
"""

from .authorization import AuthorizationService
from .base import BaseService
from .confirmation import ConfirmationService
from .processing import ProcessingService

__all__ = [
    "BaseService",
    "AuthorizationService",
    "ConfirmationService",
    "ProcessingService",
]
