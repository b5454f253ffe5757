"""Configuration helpers for django-offerings."""

import logging
from functools import lru_cache
from importlib import import_module

from django.conf import settings

from .exceptions import GatewayLoadError

logger = logging.getLogger(__name__)


DEFAULTS = {
    "AUTOSAVE_DELAY": 2.0,
    "DEFAULT_CURRENCY": "USD",
    "DEFAULT_TAX_RATE": 0,
    "DESCRIPTION_MIN_LENGTH": 10,
    "DRAFT_PERSISTENCE": "django_offerings.gateways.DatabaseDraftPersistence",
    "PUBLISHING_GATEWAY": "django_offerings.gateways.DatabasePublishingGateway",
}


def get_setting(name: str, default=None):
    """Get a setting with OFFERINGS_ prefix, falling back to DEFAULTS."""
    if default is None:
        default = DEFAULTS.get(name)
    return getattr(settings, f"OFFERINGS_{name}", default)


@lru_cache(maxsize=16)
def load_gateway(dotted_path: str):
    """
    Import and instantiate a gateway from dotted path.

    Raises GatewayLoadError for bad paths, missing classes or classes
    that are not DraftPersistence/PublishingGateway subclasses.
    """
    from .gateways import DraftPersistence, PublishingGateway

    try:
        module_path, class_name = dotted_path.rsplit('.', 1)
    except ValueError:
        raise GatewayLoadError(dotted_path, "Invalid dotted path format")

    try:
        module = import_module(module_path)
    except ImportError as e:
        raise GatewayLoadError(dotted_path, f"Cannot import module: {e}")

    try:
        gateway_class = getattr(module, class_name)
    except AttributeError:
        raise GatewayLoadError(dotted_path, f"Class '{class_name}' not found in module")

    if not isinstance(gateway_class, type) or not issubclass(
        gateway_class, (DraftPersistence, PublishingGateway)
    ):
        raise GatewayLoadError(
            dotted_path,
            f"'{class_name}' must implement DraftPersistence or PublishingGateway"
        )

    logger.debug(f"Loaded gateway {dotted_path}")
    return gateway_class()


def get_draft_persistence():
    """Return the configured DraftPersistence instance."""
    return load_gateway(get_setting("DRAFT_PERSISTENCE"))


def get_publishing_gateway():
    """Return the configured PublishingGateway instance."""
    return load_gateway(get_setting("PUBLISHING_GATEWAY"))


def clear_gateway_cache():
    """Clear the gateway loading cache. Useful for testing."""
    load_gateway.cache_clear()
