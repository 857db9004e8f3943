from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Credentials are optional: absence selects the fallback search path
    openai_api_key: Optional[SecretStr] = None
    openai_base_url: str = "https://api.openai.com/v1"
    embedding_model: str = "text-embedding-ada-002"
    chat_model: str = "gpt-3.5-turbo"

    pinecone_api_key: Optional[SecretStr] = None
    pinecone_index: str = "mediphant-test"
    pinecone_host: Optional[str] = None
    pinecone_control_url: str = "https://api.pinecone.io"

    upstream_timeout_seconds: float = 10.0

    rate_limit_window_seconds: float = 60.0
    rate_limit_max_requests: int = 100
    rate_limit_sweep_interval_seconds: float = 300.0

    history_max_items: int = 10

    corpus_path: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
