"""Application configuration and dependency factories."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

from quote_importer.adapters.supabase_client import SupabaseQuotationStore, get_supabase_client

load_dotenv()

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:3001"
REQUIRED_VARIABLES = ("SUPABASE_URL", "SUPABASE_KEY")


@dataclass(slots=True)
class Settings:
    supabase_url: str
    supabase_key: str
    api_key: str | None = None
    cors_origins: List[str] | None = None
    log_level: str = "INFO"
    # Pixels per PDF point for page images shown to the mapping UI
    pdf_render_scale: float = 2.0
    max_upload_mb: int = 10

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


def _origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


def _positive(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        value = cast(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {raw!r}")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    missing = [name for name in REQUIRED_VARIABLES if not os.environ.get(name)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        supabase_url=os.environ["SUPABASE_URL"],
        supabase_key=os.environ["SUPABASE_KEY"],
        api_key=os.environ.get("API_KEY") or None,
        cors_origins=_origins(os.environ.get("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        pdf_render_scale=_positive("PDF_RENDER_SCALE", "2.0", float),
        max_upload_mb=_positive("MAX_UPLOAD_MB", "10", int),
    )


def get_supabase():
    settings = get_settings()
    return get_supabase_client(settings.supabase_url, settings.supabase_key)


def get_store() -> SupabaseQuotationStore:
    """Store dependency of the commit route; tests override it."""
    return SupabaseQuotationStore(get_supabase())
