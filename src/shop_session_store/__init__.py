"""Shopify OAuth session storage library."""

from .app import create_app
from .config import AppConfig, LogConfig, StorageConfig, config_from_env, load_config
from .exceptions import (
    ConfigError,
    ConfigErrorCodes,
    SessionStorageError,
    SessionStorageErrorCodes,
)
from .health import HealthResponse, HealthStatus, StorageHealthCheck
from .logger import configure_logging, new_logger
from .memory import InMemorySessionStorage
from .models import Session, join_scopes, split_scopes
from .postgrest import PostgrestSessionStorage
from .routes import WebhookAuthenticator, create_webhook_router
from .storage import SessionStorage
from .webhooks import (
    WebhookContext,
    WebhookTopic,
    handle_app_uninstalled,
    handle_scopes_update,
)

__all__ = [
    "AppConfig",
    "ConfigError",
    "ConfigErrorCodes",
    "HealthResponse",
    "HealthStatus",
    "InMemorySessionStorage",
    "LogConfig",
    "PostgrestSessionStorage",
    "Session",
    "SessionStorage",
    "SessionStorageError",
    "SessionStorageErrorCodes",
    "StorageConfig",
    "StorageHealthCheck",
    "WebhookAuthenticator",
    "WebhookContext",
    "WebhookTopic",
    "config_from_env",
    "configure_logging",
    "create_app",
    "create_webhook_router",
    "handle_app_uninstalled",
    "handle_scopes_update",
    "join_scopes",
    "load_config",
    "new_logger",
    "split_scopes",
]
