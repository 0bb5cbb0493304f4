# =============================================================================
# Configuration Models Module
# =============================================================================
# Provides Pydantic Settings models for the trust ledger:
# - MongoSettings: MongoDB ledger store configuration
# - LedgerSettings: scoring defaults, attestation and lifecycle behavior
# =============================================================================

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "MongoSettings",
    "LedgerSettings",
]


# =============================================================================
# MongoDB Settings (Ledger Store)
# =============================================================================

class MongoSettings(BaseSettings):
    """
    Configuration for MongoDB (ledger store).

    Maps environment variables with prefix "MONGO_":
    - MONGO_HOST → host
    - MONGO_PORT → port
    - MONGO_INITDB_ROOT_USERNAME → username
    - MONGO_INITDB_ROOT_PASSWORD → password
    - MONGO_DATABASE → database
    - MONGO_AUTH_SOURCE → auth_source

    Attributes:
        host: MongoDB host (default: "mongodb")
        port: MongoDB port (default: 27017)
        username: MongoDB username (maps from MONGO_INITDB_ROOT_USERNAME)
        password: MongoDB password (maps from MONGO_INITDB_ROOT_PASSWORD)
        database: Database name (default: "trust_ledger")
        auth_source: Authentication source (default: "admin")
    """

    host: str = Field("mongodb", validation_alias="MONGO_HOST", description="MongoDB host")
    port: int = Field(27017, validation_alias="MONGO_PORT", description="MongoDB port")
    username: str = Field(..., validation_alias="MONGO_INITDB_ROOT_USERNAME", description="MongoDB username")
    password: str = Field(..., validation_alias="MONGO_INITDB_ROOT_PASSWORD", description="MongoDB password")
    database: str = Field("trust_ledger", validation_alias="MONGO_DATABASE", description="Database name")
    auth_source: str = Field("admin", validation_alias="MONGO_AUTH_SOURCE", description="Authentication source")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore unrelated env vars from shared .env files
    )

    @property
    def connection_string(self) -> str:
        """
        Build MongoDB connection URI.

        Format: mongodb://[username]:[password]@[host]:[port]/[database]?authSource=[auth_source]
        """
        return (
            f"mongodb://{self.username}:{self.password}@"
            f"{self.host}:{self.port}/{self.database}?authSource={self.auth_source}"
        )


# =============================================================================
# Ledger Settings (Scoring, Attestation, Lifecycle)
# =============================================================================

class LedgerSettings(BaseSettings):
    """
    Behavioral settings for the trust ledger.

    Maps environment variables with prefix "LEDGER_", e.g.
    LEDGER_VERIFICATION_BUMP=25 or LEDGER_ENFORCE_LIFECYCLE_ORDER=true.

    Attributes:
        default_completeness..default_verification: Sub-scores given to a new
            dataset before any analysis
        verification_bump: Added to the verification sub-score on a
            successful registration (result clamped to 100)
        network: Attestation network name
        storage_node_seeds: Node names used to synthesize storage proofs
        attestation_timeout_seconds: Upper bound on an attestation call
        lock_timeout_seconds: Longest wait for a busy dataset before a
            conflict is raised; unset waits indefinitely
        enforce_lifecycle_order: Reject registration before analysis
    """

    default_completeness: float = Field(80.0, ge=0.0, le=100.0)
    default_freshness: float = Field(70.0, ge=0.0, le=100.0)
    default_consistency: float = Field(75.0, ge=0.0, le=100.0)
    default_schema: float = Field(85.0, ge=0.0, le=100.0)
    default_verification: float = Field(0.0, ge=0.0, le=100.0)
    verification_bump: float = Field(50.0, ge=0.0, le=100.0)
    network: str = "DataHaven Testnet"
    storage_node_seeds: list[str] = Field(
        default_factory=lambda: ["node-alpha", "node-beta", "node-gamma", "node-delta"],
        min_length=1,
    )
    attestation_timeout_seconds: float = Field(10.0, gt=0.0)
    lock_timeout_seconds: Optional[float] = Field(None, gt=0.0)
    enforce_lifecycle_order: bool = False

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )
