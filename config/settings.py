"""
Centralized configuration for the Automagixx chatbot service.

All settings are loaded from environment variables via .env file.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    # Brand
    brand_name: str = Field(default="Automagixx", env="BRAND_NAME")

    # OpenAI
    openai_api_key: Optional[str] = Field(default=None, env="OPENAI_API_KEY")
    openai_llm_model: str = Field(default="gpt-4o-mini", env="OPENAI_LLM_MODEL")

    # AWS / Bedrock (alternative provider)
    aws_region: str = Field(default="us-east-1", env="AWS_REGION")
    bedrock_llm_model_id: str = Field(
        default="us.anthropic.claude-sonnet-4-20250514-v1:0", env="BEDROCK_LLM_MODEL_ID"
    )

    # LLM provider selection
    llm_provider: str = Field(default="openai", env="LLM_PROVIDER")  # openai | bedrock
    max_tokens: int = Field(default=500, env="MAX_TOKENS")
    temperature: float = Field(default=0.7, env="TEMPERATURE")

    # Conversation log database (in-memory log when unset)
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")
    store_timeout_seconds: float = Field(default=5.0, env="STORE_TIMEOUT_SECONDS")

    # Tenant snapshot
    snapshot_path: str = Field(default="./chatbot-configs.json", env="SNAPSHOT_PATH")
    chatbot_configs: Optional[str] = Field(default=None, env="CHATBOT_CONFIGS")
    snapshot_read_only: bool = Field(default=False, env="SNAPSHOT_READ_ONLY")
    vercel: Optional[str] = Field(default=None, env="VERCEL")

    # Widget / embed
    public_base_url: str = Field(default="http://YOUR-VM-IP:3001", env="PUBLIC_BASE_URL")
    support_phone: str = Field(default="(808) 374-2131", env="SUPPORT_PHONE")

    # API
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    api_port: int = Field(default=3001, env="API_PORT")
    admin_api_key: Optional[str] = Field(default=None, env="ADMIN_API_KEY")
    cors_origins: str = Field(default="*", env="CORS_ORIGINS")
    rate_limit_per_minute: int = Field(default=100, env="RATE_LIMIT_PER_MINUTE")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def is_bedrock(self) -> bool:
        return self.llm_provider.lower() == "bedrock"

    @property
    def is_openai(self) -> bool:
        return self.llm_provider.lower() == "openai"

    @property
    def llm_model_id(self) -> str:
        if self.is_bedrock:
            return self.bedrock_llm_model_id
        return self.openai_llm_model

    @property
    def snapshot_is_read_only(self) -> bool:
        # Serverless hosts have no writable filesystem
        return self.snapshot_read_only or bool(self.vercel)

    @property
    def cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
