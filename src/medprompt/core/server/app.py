"""Medical AI guideline prompt builder MCP server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from medprompt.core.config.settings import Settings, get_settings
from medprompt.core.llm.loader import DEFAULT_CATALOG_PATH, load_llm_catalog
from medprompt.core.llm.registry import LLMRegistry
from medprompt.core.storage.database import SettingsDatabase
from medprompt.core.storage.repository import SettingsRepository
from medprompt.core.storage.store import SqliteKeyValueStore
from medprompt.domains.guidelines.prompts.guideline_prompts import register_guideline_prompts
from medprompt.domains.guidelines.resources.catalog import register_catalog_resources
from medprompt.domains.guidelines.tools.config_tools import register_config_tools
from medprompt.domains.guidelines.tools.prompt_tools import register_prompt_tools
from medprompt.domains.guidelines.tools.settings_tools import register_settings_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "Medical AI Guideline Prompt Builder"
SERVER_VERSION = "0.1.0"


def create_app(
    *,
    repository_override: SettingsRepository | None = None,
    registry_override: LLMRegistry | None = None,
    settings_override: Settings | None = None,
) -> FastMCP:
    """Create and configure the prompt builder MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Loads the LLM catalogue into a registry
    3. Opens the settings store (SQLite file, or in-memory for ":memory:")
    4. Registers all tools, resources, and prompts
    """
    settings = settings_override or get_settings()

    # --- Server instance ---
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Builds structured prompts and search queries for retrieving Japanese "
            "medical-AI guidelines (3省2ガイドライン and related documents) with "
            "external chat services, tailored to each service's capabilities. "
            "The server never calls an AI provider or fetches documents itself."
        ),
    )

    # --- LLM catalogue ---
    if registry_override is not None:
        registry = registry_override
    else:
        registry = LLMRegistry()
        provider_count = load_llm_catalog(DEFAULT_CATALOG_PATH, registry)
        logger.info("Loaded %d LLM providers from %s", provider_count, DEFAULT_CATALOG_PATH)

    # --- Settings store ---
    if repository_override is not None:
        repository = repository_override
    else:
        database = SettingsDatabase(settings.medprompt_db_path)
        database.initialize()
        repository = SettingsRepository(SqliteKeyValueStore(database))
        logger.info(
            "Settings store opened: %s (schema v%d)",
            settings.medprompt_db_path,
            database.get_schema_version(),
        )

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "providers_loaded": len(registry.all()),
            "default_llm": (
                f"{settings.medprompt_default_llm_provider}/{settings.medprompt_default_llm_model}"
            ),
            "lite_mode": settings.medprompt_lite_mode,
        }

    register_prompt_tools(server, repository, registry, settings)
    register_config_tools(server, repository, settings)
    register_settings_tools(server, repository, settings)
    logger.info("Guideline prompt tools registered")

    # --- Register resources ---
    register_catalog_resources(server, registry, repository)

    # --- Register prompts ---
    register_guideline_prompts(server)

    return server


# Module-level instance for FastMCP discovery ("...app.py:mcp").
# Lazy: only created when this attribute is accessed (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
