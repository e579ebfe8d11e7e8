"""Guest list application package."""

from .config import AppConfig, load_config
from .controller import GuestListController, MissingFieldsError
from .models import Guest
from .providers import DataProviderError, GuestNotFoundError, create_provider
from .validation import BraceletValidationError, BraceletViolation, validate_assignment

__all__ = [
    "AppConfig",
    "BraceletValidationError",
    "BraceletViolation",
    "DataProviderError",
    "Guest",
    "GuestListController",
    "GuestNotFoundError",
    "MissingFieldsError",
    "create_provider",
    "load_config",
    "validate_assignment",
]
