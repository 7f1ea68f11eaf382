"""
Configuration module for settings, logging and store connections.
"""
from .settings import Settings, get_settings
from .database import (
    PostgresConfig,
    GraphDBConfig,
    StorageConfig,
    create_postgres_pool,
    create_storage_adapter,
)
from .logging_config import setup_logging

__all__ = [
    'Settings',
    'get_settings',
    'PostgresConfig',
    'GraphDBConfig',
    'StorageConfig',
    'create_postgres_pool',
    'create_storage_adapter',
    'setup_logging',
]
