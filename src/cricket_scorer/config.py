"""Configuration management for the cricket scorer."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    model_config = SettingsConfigDict(env_prefix="DB_", env_file=".env", extra="ignore")

    url: Optional[str] = Field(default=None, description="Full SQLAlchemy URL, overrides the parts below")
    driver: str = "sqlite"
    host: str = "localhost"
    port: int = 3306
    name: str = "cricket_scorer"
    user: str = "cricket_user"
    password: str = ""
    echo: bool = False

    @property
    def sqlalchemy_url(self) -> str:
        """Get database URL for SQLAlchemy."""
        if self.url:
            return self.url
        if self.driver == "sqlite":
            return f"sqlite:///{self.name}.db"
        return f"mysql+mysqlconnector://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class ScoringSettings(BaseSettings):
    """Scoring engine configuration settings."""

    model_config = SettingsConfigDict(env_prefix="SCORING_", env_file=".env", extra="ignore")

    max_wickets: int = Field(default=10, ge=1)
    # roster: every batting-side player is credited; batted: only those who faced a legal ball
    innings_credit_policy: Literal["roster", "batted"] = "roster"
    rankings_limit: int = Field(default=20, ge=1)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_", env_file=".env", extra="ignore")

    level: str = "INFO"
    file: Optional[str] = None


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance
settings = Settings()
