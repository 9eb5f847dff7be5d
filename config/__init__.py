"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    get_supabase_client: Supabase client factory
    check_connection: Health check function
    Catalog / get_catalog: Scholarship catalog
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    get_supabase_client,
    check_connection,
    reset_connection,
    DatabaseConnectionError
)
from config.catalog import (
    Catalog,
    CatalogEntry,
    get_catalog,
    ALL_CLASSES,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Database
    "get_supabase_client",
    "check_connection",
    "reset_connection",
    "DatabaseConnectionError",

    # Catalog
    "Catalog",
    "CatalogEntry",
    "get_catalog",
    "ALL_CLASSES",
]
