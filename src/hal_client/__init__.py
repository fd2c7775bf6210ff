"""hal_client package exports."""

from .client import USER_AGENT, VALID_CONTENT_TYPES, HalClient, __version__
from .config import (
    HalClientConfig,
    MissingEndpointError,
    create_client_from_env,
    load_env_config,
)
from .errors import HalBadResponseError, HalClientError, HalTransportError
from .factory import ResourceFactory
from .link import Link
from .logging import setup_logging
from .property import JsonValue, Property
from .resource import Resource
from .uri_template import UriTemplateExpander, expand_template

__all__ = [
    "__version__",
    # Client
    "HalClient",
    "USER_AGENT",
    "VALID_CONTENT_TYPES",
    # Resource graph
    "Resource",
    "ResourceFactory",
    "Link",
    "Property",
    "JsonValue",
    "UriTemplateExpander",
    "expand_template",
    # Exceptions
    "HalClientError",
    "HalTransportError",
    "HalBadResponseError",
    # Config helpers
    "HalClientConfig",
    "MissingEndpointError",
    "load_env_config",
    "create_client_from_env",
    # Logging
    "setup_logging",
]
