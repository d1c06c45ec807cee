"""Application configuration"""
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = "sqlite:///./authdemo.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Authentication
    DEMO_API_KEY: str = "demo-secret-key-change-in-production"  # Bearer credential for SDK clients
    ADMIN_API_KEY: str = "admin-secret-key-change-in-production"

    # Agent runtime (scripted agent is used when no key is configured)
    ANTHROPIC_API_KEY: Optional[str] = None
    AGENT_MODEL: str = "claude-haiku-4-5-20251001"
    AGENT_MAX_TOKENS: int = 1024

    # Usage limits
    CHAT_TURN_QUOTA: int = 200        # user turns per environment per 24h, 0 = unlimited
    CHAT_RATE_LIMIT: str = "30/minute"

    # Webhooks (fire-and-forget notifications for approval events)
    WEBHOOK_URL: Optional[str] = None          # Any HTTPS URL; Slack incoming webhooks auto-detected
    WEBHOOK_SECRET: Optional[str] = None       # If set, signs body with HMAC-SHA256

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: List[str] = ["100/minute", "1000/hour"]
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # Use redis:// for production

    # Monitoring
    METRICS_ENABLED: bool = True
    METRICS_PATH: str = "/metrics"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def uses_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
