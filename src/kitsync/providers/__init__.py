"""Provider install targets."""

from kitsync.providers.locator import TargetLocator
from kitsync.providers.registry import (
    DEFAULT_PROVIDER,
    PROVIDERS,
    all_provider_names,
    detect_providers,
    get_provider,
    validate_provider_names,
)

__all__ = [
    "DEFAULT_PROVIDER",
    "PROVIDERS",
    "TargetLocator",
    "all_provider_names",
    "detect_providers",
    "get_provider",
    "validate_provider_names",
]
