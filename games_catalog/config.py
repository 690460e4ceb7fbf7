"""
Configuration settings for the games catalog service.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Relational source-of-truth store
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite+aiosqlite:///./games.sqlite3",
    )
    DATABASE_CREATE_ALL: bool = (
        os.getenv("DATABASE_CREATE_ALL", "true").lower() == "true"
    )

    # Elasticsearch settings
    ELASTIC_URL: str | None = os.getenv("ELASTIC_URL", "http://localhost:9200")
    ELASTIC_CLOUD_ID: str | None = os.getenv("ELASTIC_CLOUD_ID")
    ELASTIC_API_KEY: str | None = os.getenv("ELASTIC_API_KEY")
    ELASTIC_TIMEOUT_SECONDS: float = float(os.getenv("ELASTIC_TIMEOUT_SECONDS", "10"))
    GAMES_INDEX: str = os.getenv("GAMES_INDEX", "games")
    SEARCH_HITS_INDEX: str = os.getenv("SEARCH_HITS_INDEX", "search-hits")

    # Search sizing
    SEARCH_DEFAULT_SIZE: int = int(os.getenv("SEARCH_DEFAULT_SIZE", "10"))
    SEARCH_MAX_SIZE: int = int(os.getenv("SEARCH_MAX_SIZE", "100"))
    SUGGEST_SIZE: int = int(os.getenv("SUGGEST_SIZE", "5"))

    # Redis / index maintenance queue
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    INDEX_STREAM_KEY: str = os.getenv("INDEX_STREAM_KEY", "games:index-jobs")
    INDEX_CONSUMER_GROUP: str = os.getenv("INDEX_CONSUMER_GROUP", "index-workers")
    INDEX_DLQ_STREAM_KEY: str = os.getenv("INDEX_DLQ_STREAM_KEY", "games:index-dlq")
    BATCH_MAX_MESSAGES: int = int(os.getenv("BATCH_MAX_MESSAGES", "32"))
    BATCH_MAX_WAIT_MS: int = int(os.getenv("BATCH_MAX_WAIT_MS", "200"))
    WORKER_CONCURRENCY: int = int(os.getenv("WORKER_CONCURRENCY", "1"))

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    def clamp_search_size(self, size: int | None) -> int:
        """Bound a caller-supplied result size to the configured range."""
        if size is None:
            return self.SEARCH_DEFAULT_SIZE
        return max(1, min(size, self.SEARCH_MAX_SIZE))

    def __init__(self):
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with environment={self.ENVIRONMENT}, "
            f"log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
