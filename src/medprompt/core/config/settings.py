"""Application settings loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Prompt builder server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default. Binding to anything else also requires
    # MEDPROMPT_ALLOW_INSECURE_BIND=true (there is no auth layer).
    medprompt_host: str = "127.0.0.1"
    medprompt_port: int = 8001
    medprompt_log_level: str = "info"
    medprompt_allow_insecure_bind: bool = False

    # Settings store (":memory:" keeps everything in-process)
    medprompt_db_path: str = "~/.medprompt/settings.db"

    # Share links are appended to this page URL as ?c=...
    medprompt_share_base_url: str = "http://localhost:3000/"

    # Target LLM used when a tool call does not name one
    medprompt_default_llm_provider: str = "gemini"
    medprompt_default_llm_model: str = "gemini-2-flash"

    # Lite mode: watermark output and restrict copyable sections
    medprompt_lite_mode: bool = False

    # Where downloadable artifacts (prompt .txt, config .json) are written
    medprompt_export_dir: str = "~/.medprompt/exports"


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
