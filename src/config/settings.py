from pydantic_settings import BaseSettings
import os

class DatabaseSettings(BaseSettings):
    URL: str = os.getenv("DATABASE_URL", "postgresql://search_user:search_password@db:5432/listings_db")
    CONNECT_TIMEOUT_SECONDS: int = 5
    # Autosuggest must answer well under a second; a slower query is treated as a failure.
    STATEMENT_TIMEOUT_MS: int = 2000

class RedisSettings(BaseSettings):
    URL: str = os.getenv("REDIS_URL", "redis://redis:6379/0")
    TTL_SECONDS: int = 60
    ENABLED: bool = os.getenv("REDIS_CACHE_ENABLED", "true").lower() == "true"

class ServerSettings(BaseSettings):
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = False

class LoggingSettings(BaseSettings):
    LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

class SearchSettings(BaseSettings):
    MIN_QUERY_LENGTH: int = 2

    # Autosuggest
    DEFAULT_SUGGESTION_LIMIT: int = 5
    MAX_SUGGESTION_LIMIT: int = 10

    # Paged listing search
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100
    MAX_PAGE: int = 1000

    # Listings below this price (or unpriced) are hidden outside URL lookups
    MIN_PRICE_JPY: int = int(os.getenv("MIN_PRICE_JPY", 100000))

    # HTTP cache directives (edge cache)
    CACHE_MAX_AGE_SECONDS: int = 60
    STALE_WHILE_REVALIDATE_SECONDS: int = 300

class AppSettings(BaseSettings):
    DB: DatabaseSettings = DatabaseSettings()
    REDIS: RedisSettings = RedisSettings()
    SERVER: ServerSettings = ServerSettings()
    LOGGING: LoggingSettings = LoggingSettings()
    SEARCH: SearchSettings = SearchSettings()

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = AppSettings()
