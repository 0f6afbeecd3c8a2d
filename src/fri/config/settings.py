"""Application settings loaded from environment."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strongly typed settings for the intake tooling."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    pghost: Optional[str] = Field(default=None, alias="PGHOST")
    pgport: int = Field(default=5432, alias="PGPORT")
    pguser: Optional[str] = Field(default=None, alias="PGUSER")
    pgpassword: Optional[str] = Field(default=None, alias="PGPASSWORD")
    pgdatabase: Optional[str] = Field(default=None, alias="PGDATABASE")

    # Supabase
    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")
    extract_function_name: str = Field(default="extract-report", alias="EXTRACT_FUNCTION_NAME")
    ocr_function_name: str = Field(default="ocr-image", alias="OCR_FUNCTION_NAME")

    # Extraction / OCR
    extraction_backend: Literal["functions", "gemini"] = Field(
        default="functions", alias="EXTRACTION_BACKEND"
    )
    extract_prompt_version: str = Field(default="ex_v001", alias="EXTRACT_PROMPT_VERSION")
    ocr_prompt_version: str = Field(default="ocr_v001", alias="OCR_PROMPT_VERSION")
    http_timeout_seconds: int = Field(default=60, alias="HTTP_TIMEOUT_SECONDS")
    max_image_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_IMAGE_BYTES")

    # LLM providers
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    gemini_api_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_API_BASE_URL",
    )
    gemini_model_id: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL_ID")
    gemini_temperature: float = Field(default=0.1, alias="GEMINI_TEMPERATURE")
    gemini_max_output_tokens: int = Field(default=8192, alias="GEMINI_MAX_OUTPUT_TOKENS")
    llm_max_attempts: int = Field(default=1, alias="LLM_MAX_ATTEMPTS")

    # Runtime
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    run_env: str = Field(default="local", alias="RUN_ENV")

    def get_database_url(self) -> str:
        """Return a usable database URL or raise."""
        if self.database_url:
            return self.database_url

        if all([self.pghost, self.pguser, self.pgpassword, self.pgdatabase]):
            return (
                "postgresql://"
                f"{self.pguser}:{self.pgpassword}@{self.pghost}:{self.pgport}/"
                f"{self.pgdatabase}"
            )

        raise ValueError("DATABASE_URL or PG* env vars must be set")

    def get_functions_url(self, function_name: str) -> str:
        """Return the edge function endpoint for ``function_name`` or raise."""
        if not self.supabase_url:
            raise ValueError("SUPABASE_URL must be set to call backend functions")
        return f"{self.supabase_url.rstrip('/')}/functions/v1/{function_name}"

    def get_functions_key(self) -> str:
        """Key sent as bearer token to backend functions."""
        key = self.supabase_anon_key or self.supabase_service_role_key
        if not key:
            raise ValueError("SUPABASE_ANON_KEY or SUPABASE_SERVICE_ROLE_KEY must be set")
        return key
