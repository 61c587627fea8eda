"""
Configuration management for the HVC service
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseSettings):
    """Server configuration"""
    model_config = SettingsConfigDict(env_prefix="SERVER_")

    port: int = Field(default=8000)
    host: str = Field(default="0.0.0.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)


class PersistenceConfig(BaseSettings):
    """Persistence backend configuration"""
    model_config = SettingsConfigDict(env_prefix="PERSISTENCE_")

    backend: str = Field(default="memory")  # memory or supabase
    supabase_url: str = Field(default="http://localhost:54321")
    supabase_key: Optional[str] = Field(default=None)
    timeout: float = Field(default=10.0)  # seconds


class EngineConfig(BaseSettings):
    """Thresholds and windows used by the recovery engine"""
    model_config = SettingsConfigDict(env_prefix="ENGINE_")

    timezone: str = Field(default="America/Lima")
    trend_window_days: int = Field(default=30)
    low_average_score: float = Field(default=7.0)
    at_risk_alert_count: int = Field(default=5)
    min_recovery_rate: float = Field(default=50.0)
    strong_nps: int = Field(default=50)
    trend_drop: float = Field(default=1.0)
    max_insights: int = Field(default=4)
    loyal_min_interactions: int = Field(default=5)


class LoggingConfig(BaseSettings):
    """Logging configuration"""
    model_config = SettingsConfigDict(env_prefix="LOGGING_")

    level: str = Field(default="INFO")
    log_format: str = Field(default="json")  # json or text


class Config:
    """Main configuration class"""

    def __init__(self):
        self.server = ServerConfig()
        self.persistence = PersistenceConfig()
        self.engine = EngineConfig()
        self.logging = LoggingConfig()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.server.environment.lower() == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.server.environment.lower() == "production"


# Global configuration instance
config = Config()
