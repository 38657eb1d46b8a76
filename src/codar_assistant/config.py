from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
import yaml
from pathlib import Path
from typing import Any, Dict, List

DATA_DIR = Path(__file__).parent / "data"

class Settings(BaseSettings):
    SLACK_BOT_TOKEN: str = Field(..., description="Slack Bot User OAuth Token")
    SLACK_APP_TOKEN: str = Field(..., description="Slack App-Level Token (for Socket Mode)")
    SLACK_SIGNING_SECRET: str = Field("", description="Signing secret (unused in Socket Mode)")
    OPENROUTER_API_KEY: str = Field(..., description="OpenRouter API Key")
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    DEFAULT_MODEL: str = "meta-llama/llama-4-maverick"
    MAX_TOKENS: int = Field(2000, ge=1)
    HISTORY_LIMIT: int = Field(50, ge=1, le=1000)
    INVOLVEMENT_WINDOW: int = Field(5, ge=1)
    MENTIONS_ENABLED: bool = Field(False, description="Answer direct @mentions")
    LOG_LEVEL: str = "INFO"

    # MLflow settings
    MLFLOW_TRACKING_URI: str = Field("http://127.0.0.1:5000", description="MLflow tracking server URI")
    MLFLOW_ENABLE_TRACING: bool = Field(False, description="Enable MLflow tracing")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

@lru_cache()
def get_settings() -> Settings:
    return Settings()

def load_model_catalog() -> List[Dict[str, Any]]:
    path = DATA_DIR / "models.yaml"
    if not path.exists():
        return []
    with open(path, "r") as f:
        return (yaml.safe_load(f) or {}).get("models", [])
