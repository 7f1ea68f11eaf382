from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from functools import lru_cache

TEST_JWT_SECRET = "test-secret-key-minimum-32-characters-long-for-jwt-validation"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables can come from:
    - docker-compose.yml environment section
    - .env file (for secrets like passwords and keys)
    - System environment

    Variable names match docker-compose conventions:
    - POSTGRES_HOST, POSTGRES_PORT, etc. (content store)
    - GRAPHDB_URI, GRAPHDB_USER, GRAPHDB_PASSWORD (metadata graph)
    - MINIO_ENDPOINT, MINIO_ACCESS_KEY, ... (object storage)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # Environment
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 3000
    api_v1_prefix: str = "/api/v1"

    # JWT (tokens are issued elsewhere, the key is shared)
    jwt_secret_key: str = ""

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "nallo_user"
    postgres_password: str = ""
    postgres_db: str = "nallo"
    postgres_pool_min: int = 5
    postgres_pool_max: int = 20

    # Graph database (Neo4j)
    graphdb_uri: str = "bolt://localhost:7687"
    graphdb_user: str = "neo4j"
    graphdb_password: str = ""
    graphdb_max_pool_size: int = 50
    graphdb_connection_timeout: float = 30.0

    # Object storage (MinIO / S3)
    minio_endpoint: str = "localhost"
    minio_port: int = 9000
    minio_use_ssl: bool = False
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_bucket_name: str = "nallo-files"
    minio_region: str = "us-east-1"

    # Content at or above this many bytes is mirrored into object storage
    storage_blob_threshold: int = 256 * 1024

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return str(v or "INFO").upper()

    @field_validator('jwt_secret_key', mode='after')
    @classmethod
    def check_jwt_secret(cls, v, info):
        """Test runs get a fixed key; everything else needs a real one"""
        if info.data.get('environment') == 'test' and len(v) < 32:
            return TEST_JWT_SECRET
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
