"""
Database Configuration
======================

Centralized connection configuration for the API process.
Handles PostgreSQL (content), the graph database (metadata) and
object storage (blobs), all derived from Settings.
"""
from dataclasses import dataclass
from typing import Optional

from .settings import Settings, get_settings


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""
    host: str
    port: int
    user: str
    password: str
    database: str
    min_size: int = 5
    max_size: int = 20

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'PostgresConfig':
        settings = settings or get_settings()
        return cls(
            host=settings.postgres_host,
            port=settings.postgres_port,
            user=settings.postgres_user,
            password=settings.postgres_password,
            database=settings.postgres_db,
            min_size=settings.postgres_pool_min,
            max_size=settings.postgres_pool_max,
        )

    def to_asyncpg_kwargs(self) -> dict:
        """Convert to asyncpg.create_pool kwargs."""
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database,
            'min_size': self.min_size,
            'max_size': self.max_size,
        }


@dataclass
class GraphDBConfig:
    """Graph database (Neo4j) connection configuration."""
    uri: str
    user: str
    password: str
    max_pool_size: int = 50
    connection_timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'GraphDBConfig':
        settings = settings or get_settings()
        return cls(
            uri=settings.graphdb_uri,
            user=settings.graphdb_user,
            password=settings.graphdb_password,
            max_pool_size=settings.graphdb_max_pool_size,
            connection_timeout=settings.graphdb_connection_timeout,
        )


@dataclass
class StorageConfig:
    """S3-compatible object storage configuration."""
    endpoint: str
    port: int
    use_ssl: bool
    access_key: str
    secret_key: str
    bucket: str
    region: str = "us-east-1"

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> 'StorageConfig':
        settings = settings or get_settings()
        return cls(
            endpoint=settings.minio_endpoint,
            port=settings.minio_port,
            use_ssl=settings.minio_use_ssl,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            bucket=settings.minio_bucket_name,
            region=settings.minio_region,
        )

    @property
    def endpoint_url(self) -> str:
        """Full endpoint URL for boto3 (MINIO_ENDPOINT is a bare host)."""
        if self.endpoint.startswith(("http://", "https://")):
            return self.endpoint
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}:{self.port}"


async def create_postgres_pool(settings: Optional[Settings] = None):
    """Create PostgreSQL connection pool from settings."""
    import asyncpg
    config = PostgresConfig.from_settings(settings)
    return await asyncpg.create_pool(**config.to_asyncpg_kwargs())


async def create_storage_adapter(settings: Optional[Settings] = None):
    """Create the object storage adapter and make sure its bucket exists."""
    from services.storage_adapter import StorageAdapter
    adapter = StorageAdapter(StorageConfig.from_settings(settings))
    await adapter.ensure_bucket()
    return adapter
