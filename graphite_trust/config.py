"""
Configuration management for the Graphite Trust Gateway.

Uses pydantic-settings for environment variable loading and validation.
"""

from typing import List
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScoringPolicy(BaseModel):
    """
    Business constants used by the trust scoring rules.

    These numbers have no derivation of their own; they are tunable per
    deployment via SCORING__<FIELD> environment variables.
    """

    model_config = {"frozen": True}

    # Lending terms
    loan_unit: Decimal = Field(
        default=Decimal("1000"),
        description="Dollar amount per unit of trust x KYC multiplier"
    )
    base_interest_rate: Decimal = Field(
        default=Decimal("5.0"),
        description="Base interest rate in percent"
    )
    kyc_rate_discount: Decimal = Field(
        default=Decimal("0.5"),
        description="Interest discount in percent per KYC level"
    )
    high_risk_reputation: int = Field(
        default=300,
        description="Reputation below which the high risk premium applies"
    )
    high_risk_premium: Decimal = Field(
        default=Decimal("5"),
        description="Risk premium in percent for low reputation"
    )
    medium_risk_reputation: int = Field(
        default=500,
        description="Reputation below which the medium risk premium applies"
    )
    medium_risk_premium: Decimal = Field(
        default=Decimal("2"),
        description="Risk premium in percent for moderate reputation"
    )

    # Marketplace listing caps
    verified_listing_cap: Decimal = Field(
        default=Decimal("50000"),
        description="Max listing value for verified sellers"
    )
    building_listing_cap: Decimal = Field(
        default=Decimal("10000"),
        description="Max listing value for sellers building reputation"
    )
    minimal_listing_cap: Decimal = Field(
        default=Decimal("1000"),
        description="Max listing value for new accounts"
    )
    high_value_listing_threshold: Decimal = Field(
        default=Decimal("10000"),
        description="Listings above this value need high-value clearance"
    )


DEFAULT_POLICY = ScoringPolicy()


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    server_host: str = Field(default="localhost", description="Server host address")
    server_port: int = Field(default=8000, description="Server port")
    env: str = Field(default="development", description="Environment (development/production)")
    debug: bool = Field(default=True, description="Debug mode")

    # Graphite Node Configuration
    graphite_node_url: str = Field(
        default="http://localhost:8545",
        description="JSON-RPC URL of the Graphite node"
    )
    private_key: str = Field(
        default="",
        description="Private key of the signing account"
    )
    graphite_api_url: str = Field(
        default="",
        description="Block explorer API base URL"
    )

    # Graphite system contracts
    activation_contract: str = Field(
        default="0x0000000000000000000000000000000000001000",
        description="Account activation contract address"
    )
    reputation_contract: str = Field(
        default="0x0000000000000000000000000000000000001001",
        description="Reputation contract address"
    )
    kyc_contract: str = Field(
        default="0x0000000000000000000000000000000000001002",
        description="KYC contract address"
    )
    filter_contract: str = Field(
        default="0x0000000000000000000000000000000000001003",
        description="Transaction filter contract address"
    )

    # Trust scoring constants
    scoring: ScoringPolicy = Field(
        default_factory=ScoringPolicy,
        description="Lending and marketplace business constants"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="json",
        description="Log format (json or text)"
    )

    # CORS Configuration
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8080",
        description="Comma-separated list of allowed CORS origins"
    )

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate server port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("Server port must be between 1 and 65535")
        return v

    @field_validator("env")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is development or production."""
        if v not in ["development", "production"]:
            raise ValueError("Environment must be 'development' or 'production'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ["json", "text"]:
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == "production"

    def validate_required_production_settings(self) -> None:
        """
        Validate that required settings are configured for production.

        Raises ValueError if critical settings are missing in production.
        """
        if not self.is_production:
            return

        errors = []

        if not self.private_key:
            errors.append("PRIVATE_KEY is required in production")

        if self.graphite_node_url.startswith("http://localhost"):
            errors.append("GRAPHITE_NODE_URL must point at a real node in production")

        if self.debug:
            errors.append("DEBUG should be False in production")

        if errors:
            raise ValueError(
                "Production configuration errors:\n" + "\n".join(f"  - {err}" for err in errors)
            )

    def model_post_init(self, __context) -> None:
        """Validate configuration after initialization."""
        if self.is_production:
            self.validate_required_production_settings()


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance.

    This function can be used as a FastAPI dependency.
    """
    return settings


__all__ = ["ScoringPolicy", "DEFAULT_POLICY", "Settings", "settings", "get_settings"]
