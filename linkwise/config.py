from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator, model_validator
from typing import Optional, Literal
from loguru import logger
import sys
from urllib.parse import quote


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Application environment"
    )

    # LinkedIn credentials
    linkedin_email: Optional[str] = Field(default=None, description="LinkedIn login email")
    linkedin_password: Optional[str] = Field(default=None, description="LinkedIn login password")

    # Evaluation service
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    openai_model: str = Field(default="gpt-4o-mini", description="Chat model used for scoring and messages")
    scoring_temperature: float = Field(default=0.7, ge=0, le=2)
    composer_temperature: float = Field(default=0.5, ge=0, le=2)
    max_tokens: int = Field(default=100, ge=1, le=4096)

    # Durable lead store
    database_host: str = Field(default="localhost", description="Database host")
    database_port: int = Field(
        default=5432, ge=1, le=65535, description="Database port"
    )
    database_name: str = Field(
        default="postgres", min_length=1, description="Database name"
    )
    database_user: str = Field(default="postgres", min_length=1, description="Database username")
    database_password: Optional[str] = Field(
        default="postgres", description="Database password"
    )
    database_table: str = Field(default="leads", description="Table receiving lead records")
    database_pool_min: int = Field(
        default=1, ge=1, le=100, description="Minimum database pool size"
    )
    database_pool_max: int = Field(
        default=5, ge=1, le=100, description="Maximum database pool size"
    )
    database_ssl: Literal["disable", "prefer", "require"] = Field(
        default="prefer", description="SSL mode for the lead store connection"
    )

    # Pipeline behaviour
    min_bio_length: int = Field(
        default=80,
        ge=0,
        description="Bios shorter than this are scored with the default score without an API call",
    )
    default_score: float = Field(
        default=1.0,
        ge=0,
        le=10,
        description="Score assigned when a bio is uninformative or evaluation fails",
    )
    outreach_threshold: float = Field(
        default=7.0, ge=0, le=10, description="Minimum angel score to send a connection request"
    )
    login_max_attempts: int = Field(default=3, ge=1, le=10)
    login_retry_delay: float = Field(
        default=5.0, ge=0, le=300, description="Seconds to wait between login attempts"
    )
    navigation_timeout_ms: int = Field(default=20000, ge=1000)
    element_timeout_ms: int = Field(default=20000, ge=500)
    outreach_timeout_ms: int = Field(default=12000, ge=500)
    scroll_settle_ms: int = Field(default=6000, ge=0)
    action_settle_ms: int = Field(default=6000, ge=0)
    typing_delay_ms: int = Field(default=150, ge=0)
    note_typing_delay_ms: int = Field(default=50, ge=0)
    headless: bool = Field(default=True, description="Run the browser without a window")
    show_browser: bool = Field(default=False, description="Overrides headless when set")
    slow_mo_ms: int = Field(default=50, ge=0)
    email_domain: str = Field(default="mockemail.com", description="Domain for placeholder emails")
    lead_tags: str = Field(default="auto", description="Tags stamped on every lead record")

    input_file: str = Field(default="linkedin_profiles.json")
    output_file: str = Field(default="public/leads_output.json")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: str = Field(
        default="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} - {message}",
        description="Log format string",
    )
    log_rotation: str = Field(default="100 MB", description="Log file rotation size")
    log_retention: str = Field(default="10 days", description="Log retention period")
    log_file: Optional[str] = Field(default="logs/app.log", description="Log file path")

    app_name: str = Field(default="LinkWise", description="Application name")

    @field_validator("database_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @model_validator(mode="after")
    def validate_pool_sizes(self) -> "Settings":
        """Ensure max pool size is greater than min pool size"""
        if self.database_pool_max < self.database_pool_min:
            raise ValueError(
                "database_pool_max must be greater than or equal to database_pool_min"
            )
        return self

    @property
    def database_url(self) -> str:
        """Postgres DSN for the lead store pool, credentials percent-encoded"""
        password = f":{quote(self.database_password, safe='')}" if self.database_password else ""
        return f"postgresql://{quote(self.database_user, safe='')}{password}@{self.database_host}:{self.database_port}/{self.database_name}"

    @property
    def browser_headless(self) -> bool:
        return self.headless and not self.show_browser

    def missing_credentials(self) -> list[str]:
        """Names of the environment variables a pipeline run cannot start without"""
        required = {
            "LINKEDIN_EMAIL": self.linkedin_email,
            "LINKEDIN_PASSWORD": self.linkedin_password,
            "OPENAI_API_KEY": self.openai_api_key,
        }
        return [name for name, value in required.items() if not value]

    def configure_logging(self) -> None:
        """Configure loguru based on settings"""
        logger.remove()

        logger.add(
            sys.stderr, format=self.log_format, level=self.log_level, colorize=True
        )

        if self.log_file:
            logger.add(
                self.log_file,
                format=self.log_format,
                level=self.log_level,
                rotation=self.log_rotation,
                retention=self.log_retention,
                compression="zip",
            )

        logger.info(f"Logging configured for {self.environment} environment")


def get_settings() -> Settings:
    """Get cached settings instance"""
    settings = Settings()
    settings.configure_logging()
    return settings


settings = get_settings()
