"""
Purpose:
- Centralized configuration using pydantic-settings.
- Reads from environment variables and optional .env file.
- Keeps model names, limits and host/port tunable without code changes.
"""

from typing import List, Optional
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Pydantic v2 config (env file + ignore unexpected env vars)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API host/port
    host: str = Field(default="0.0.0.0", description="Bind address for FastAPI/Uvicorn")
    port: int = Field(default=8000, description="Port for FastAPI/Uvicorn")

    # CORS
    cors_allow_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        description="Allowed origins for browser apps"
    )

    # The one secret. Accepts the names the Gemini tooling usually reads.
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY"),
    )

    # ---- Gemini models ----
    edit_model_name: str = Field(default="gemini-2.5-flash-image", description="Image-in/image-out model")
    caption_model_name: str = Field(default="gemini-3-flash-preview", description="Image-in/text-out model")
    image_mime_type: str = Field(default="image/png", description="Mime type sent with inline image parts")

    # ---- Upload limits ----
    max_upload_bytes: int = Field(default=10 * 1024 * 1024)
    allowed_image_formats: List[str] = Field(default=["PNG", "JPEG", "WEBP", "GIF", "BMP"])

    # ---- UI knobs ----
    copied_indicator_ms: int = Field(default=2000, description="How long the 'copied' badge stays up")
    download_filename: str = Field(default="edited-image.png")

    # ---- Sessions (memory only) ----
    session_cookie_name: str = Field(default="studio_session")
    session_ttl_seconds: int = Field(default=6 * 60 * 60)

    log_level: str = Field(default="INFO")

settings = Settings()
