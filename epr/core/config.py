"""Application configuration using pydantic settings with structured sections."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./epr.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me-in-production", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60


class PricingSettings(BaseModel):
    bill_generation_fee: Decimal = Decimal("0.50")
    verification_min_fee: Decimal = Decimal("1.00")
    verification_max_fee: Decimal = Decimal("10.00")
    verification_percentage: Decimal = Decimal("0.01")
    percentage_damping: Decimal = Decimal("0.5")
    restricted_multiplier: Decimal = Decimal("1.5")
    loyalty_interval: int = Field(default=10, ge=1)
    currency: str = "INR"


class VerificationSettings(BaseModel):
    timeout_seconds: float = Field(default=10.0, gt=0)
    audit_rejected_attempts: bool = True
    retry_interval_seconds: float = Field(default=30.0, gt=0)


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "EPR Verification Service"
    api_prefix: str = "/api"
    frontend_url: str = "http://localhost:3000"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    pricing: PricingSettings = PricingSettings()
    verification: VerificationSettings = VerificationSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
