from typing import List, Literal, Optional
from pydantic import PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Patent Desk API"
    VERSION: str = "0.1.0"
    API_PREFIX: str = "/api"
    GRAPHQL_PATH: str = "/graphql"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "patentdesk"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None  # e.g. sqlite+aiosqlite:///./patentdesk.db
    SQL_ECHO: bool = False

    # Auth
    SECRET_KEY: str = "change-me-in-production-openssl-rand-hex-32"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 # 1 day

    # Ownership: non-owners get 404 instead of 403
    HIDE_FOREIGN_RESOURCES: bool = True

    @computed_field
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return str(PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        ))

    # File storage
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    MAX_UPLOAD_BYTES: int = 25 * 1024 * 1024

    # Analysis
    ANALYSIS_PROVIDER: Literal["llm", "transformers", "stub"] = "llm"
    ANALYSIS_FAILURE_POLICY: Literal["fail", "fallback"] = "fail"

    LLM_PROVIDER_PRIMARY: str = "openai"
    LLM_PROVIDER_EMBEDDING: str = "openai"

    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL_PRIMARY: str = "gpt-4o"
    OPENAI_MODEL_EMBEDDING: str = "text-embedding-3-small"

    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_MODEL_PRIMARY: str = "llama3.1:8b"
    OLLAMA_MODEL_EMBEDDING: str = "nomic-embed-text"

    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_MODEL_PRIMARY: str = "claude-3-5-sonnet-latest"

    LOCAL_MODEL_CLASSIFIER: str = "facebook/bart-large-mnli"
    LOCAL_MODEL_EMBEDDING: str = "AI-Growth-Lab/PatentSBERTa"
    LOCAL_MODEL_SUMMARY: str = "sshleifer/distilbart-cnn-12-6"
    LOCAL_MODEL_NER: str = "dslim/bert-base-NER"

    # Search report
    PRIOR_ART_CORPUS_LIMIT: int = 200
    PRIOR_ART_MAX_REFERENCES: int = 5
    PRIOR_ART_MIN_RELEVANCE: float = 0.5
    CLAIM_MATCH_THRESHOLD: float = 0.7
    SIMILAR_PATENTS_LIMIT: int = 5

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env")

settings = Settings()
