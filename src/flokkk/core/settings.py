"""Application settings and configuration.

This module defines all configuration options for the flokkk API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="flokkk", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(default="sqlite:///./flokkk.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis backs the AI rate limiter and the web search cache
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Notification feed
    notifications_page_size: int = Field(default=20, alias="NOTIFICATIONS_PAGE_SIZE")
    notifications_max_page_size: int = Field(default=100, alias="NOTIFICATIONS_MAX_PAGE_SIZE")

    # Recently viewed history
    recently_viewed_max_items: int = Field(default=50, alias="RECENTLY_VIEWED_MAX_ITEMS")
    recently_viewed_page_size: int = Field(default=20, alias="RECENTLY_VIEWED_PAGE_SIZE")

    # Studio analytics
    studio_top_posts: int = Field(default=5, alias="STUDIO_TOP_POSTS")

    # Anthropic (category classifier)
    anthropic_api_key: str | None = Field(default=None, alias="ANTHROPIC_API_KEY")
    anthropic_api_url: str = Field(
        default="https://api.anthropic.com/v1/messages",
        alias="ANTHROPIC_API_URL",
    )
    anthropic_version: str = Field(default="2023-06-01", alias="ANTHROPIC_VERSION")
    classifier_model: str = Field(default="claude-3-haiku-20240307", alias="CLASSIFIER_MODEL")
    classifier_max_tokens: int = Field(default=10, alias="CLASSIFIER_MAX_TOKENS")
    classifier_timeout_seconds: float = Field(default=15.0, alias="CLASSIFIER_TIMEOUT_SECONDS")

    # Tavily (web search)
    tavily_api_key: str | None = Field(default=None, alias="TAVILY_API_KEY")
    tavily_api_url: str = Field(default="https://api.tavily.com/search", alias="TAVILY_API_URL")
    web_search_timeout_seconds: float = Field(default=20.0, alias="WEB_SEARCH_TIMEOUT_SECONDS")
    web_search_max_results: int = Field(default=5, alias="WEB_SEARCH_MAX_RESULTS")
    web_search_daily_limit: int = Field(default=30, alias="WEB_SEARCH_DAILY_LIMIT")
    web_search_warning_threshold: int = Field(default=5, alias="WEB_SEARCH_WARNING_THRESHOLD")
    web_search_cache_hours: int = Field(default=24, alias="WEB_SEARCH_CACHE_HOURS")

    # AI request rate limits (requests per window)
    ai_rate_window_seconds: int = Field(default=3600, alias="AI_RATE_WINDOW_SECONDS")
    ai_rate_limit_suggestion: int = Field(default=60, alias="AI_RATE_LIMIT_SUGGESTION")
    ai_rate_limit_manual: int = Field(default=30, alias="AI_RATE_LIMIT_MANUAL")

    # Community search used by the chat assistant
    community_search_limit: int = Field(default=10, alias="COMMUNITY_SEARCH_LIMIT")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def rate_limits(self) -> dict[str, int]:
        """Return AI request limits per request type."""
        return {
            "suggestion": self.ai_rate_limit_suggestion,
            "manual": self.ai_rate_limit_manual,
        }


settings = Settings()  # type: ignore[call-arg]
