"""
Configuration management using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
Use a .env file for local development.

Environment Variables:
    SOURCE_URL: Page to load documents from (overrides the per-command default)
    AWS_REGION: AWS region for the Bedrock runtime client
    LLM_MODEL_ID: Bedrock model ID used for generation
    EMBEDDING_MODEL: Bedrock (or HuggingFace) embedding model
    CHUNK_SIZE: Character size for document chunks
    CHUNK_OVERLAP: Overlap between chunks
    VECTOR_STORE: Vector store backend (pgvector or faiss)
    PG_HOST / PG_USER / PG_PASSWORD / PG_DATABASE: pgvector connection
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional
from urllib.parse import quote

from pydantic import Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

RAG_DEFAULT_SOURCE_URL = "https://docs.aws.amazon.com/bedrock/latest/userguide/br-studio.html"
DOC_CHAT_DEFAULT_SOURCE_URL = "https://docs.aws.amazon.com/bedrock/latest/userguide/model-ids.html"
HF_DEFAULT_EMBEDDING_MODEL = "sentence-transformers/all-MiniLM-L6-v2"
HF_DEFAULT_EMBEDDING_DIMENSION = 384


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Document Source
    # ==========================================================================
    source_url: Optional[str] = Field(
        default=None,
        description="URL of the page to load (each command has its own default)",
    )
    fetch_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for fetching the source page",
    )

    # ==========================================================================
    # AWS / Bedrock
    # ==========================================================================
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region for the Bedrock runtime client",
    )
    bedrock_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts botocore makes per Bedrock call",
    )

    # ==========================================================================
    # Model Configuration
    # ==========================================================================
    llm_provider: Literal["bedrock", "custom"] = Field(
        default="bedrock",
        description="Generation backend",
    )
    llm_model_id: str = Field(
        default="amazon.titan-text-premier-v1:0",
        description="Bedrock model ID for generation",
    )
    llm_max_tokens: int = Field(
        default=3072,
        ge=1,
        le=8192,
        description="Maximum tokens for LLM response",
    )
    llm_temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Temperature for LLM generation (lower = more deterministic)",
    )
    custom_endpoint_url: str = Field(
        default="http://localhost:8000/v1/chat/completions",
        description="OpenAI-compatible endpoint URL (llm_provider=custom)",
    )

    embedding_provider: Literal["bedrock", "huggingface"] = Field(
        default="bedrock",
        description="Embedding backend",
    )
    embedding_model: str = Field(
        default="amazon.titan-embed-text-v1",
        description="Model ID for document/query embeddings (HuggingFace default applies for that provider)",
    )
    embedding_dimension: int = Field(
        default=1536,
        ge=1,
        description="Dimension of embedding vectors (must match model; 384 for the HuggingFace default)",
    )
    hf_api_key: Optional[SecretStr] = Field(
        default=None,
        description="HuggingFace API key (embedding_provider=huggingface)",
    )

    # ==========================================================================
    # Chunking Configuration
    # ==========================================================================
    chunk_size: int = Field(
        default=512,
        ge=1,
        le=8192,
        description="Maximum size in characters for document chunks",
    )
    chunk_overlap: int = Field(
        default=100,
        ge=0,
        description="Overlap between consecutive chunks",
    )

    # ==========================================================================
    # Retrieval Configuration
    # ==========================================================================
    retrieval_top_k: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of chunks to retrieve",
    )
    context_delimiter: str = Field(
        default="\n\n",
        description="Separator placed between retrieved chunks in the prompt",
    )

    # ==========================================================================
    # Vector Store Configuration
    # ==========================================================================
    vector_store: Literal["pgvector", "faiss"] = Field(
        default="pgvector",
        description="Vector store backend",
    )
    pg_host: str = Field(default="localhost")
    pg_port: int = Field(default=5432, ge=1, le=65535)
    pg_user: str = Field(default="postgres")
    pg_password: SecretStr = Field(default=SecretStr("postgres"))
    pg_database: str = Field(default="postgres")
    pg_collection: str = Field(
        default="bedrockrag_documents",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Table holding the stored chunks",
    )
    pg_pre_delete_collection: bool = Field(
        default=False,
        description="Drop the collection table before loading",
    )
    faiss_index_path: Path = Field(
        default=Path("data/index/faiss.index"),
        description="Path to FAISS index file (vector_store=faiss)",
    )

    # ==========================================================================
    # Observability Configuration
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("chunk_overlap")
    @classmethod
    def validate_chunk_overlap(cls, v: int, info) -> int:
        """Ensure overlap is less than chunk size."""
        chunk_size = info.data.get("chunk_size", 512)
        if v >= chunk_size:
            raise ValueError(f"chunk_overlap ({v}) must be less than chunk_size ({chunk_size})")
        return v

    @field_validator("faiss_index_path")
    @classmethod
    def resolve_path(cls, v: Path) -> Path:
        """Resolve paths to absolute paths."""
        return v.resolve()

    @model_validator(mode="after")
    def apply_huggingface_defaults(self) -> "Settings":
        """Use a HuggingFace model when that provider is chosen without one."""
        if self.embedding_provider == "huggingface":
            if "embedding_model" not in self.model_fields_set:
                self.embedding_model = HF_DEFAULT_EMBEDDING_MODEL
            if "embedding_dimension" not in self.model_fields_set:
                self.embedding_dimension = HF_DEFAULT_EMBEDDING_DIMENSION
        return self

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def hf_api_key_value(self) -> Optional[str]:
        """Get the actual API key value (use sparingly)."""
        if self.hf_api_key:
            return self.hf_api_key.get_secret_value()
        return None

    @property
    def pg_connection_url(self) -> str:
        """SQLAlchemy URL for the pgvector database."""
        password = quote(self.pg_password.get_secret_value(), safe="")
        return (
            f"postgresql+psycopg://{self.pg_user}:{password}"
            f"@{self.pg_host}:{self.pg_port}/{self.pg_database}?sslmode=disable"
        )

    def resolve_source_url(self, default: str) -> str:
        """Return SOURCE_URL if set, else the caller's default."""
        return self.source_url or default


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once.
    Call `get_settings.cache_clear()` to reload settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
