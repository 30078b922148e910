"""MCP tools for generating guideline-retrieval prompts and search queries.

The prompt is assembled from the stored configuration and extended settings,
then adjusted once for the target chat service. In lite mode the prompt is
watermarked and the response carries the lite-mode disclaimer.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from medprompt.core.codec.artifacts import prompt_filename, write_artifact
from medprompt.core.codec.share_link import parse_config_json
from medprompt.core.lite.policy import (
    SECTION_BASIC_QUERIES,
    SECTION_PROMPT,
    add_watermark,
    can_copy,
    lite_notice,
    new_copy_tracker,
)
from medprompt.core.llm.adjust import render_for_model
from medprompt.core.template.engine import generate_search_queries as build_search_queries
from medprompt.core.template.models import AppConfig
from medprompt.core.template.schemas import (
    validate_app_config,
    validate_extended_settings,
    validate_tab_preset,
)
from medprompt.domains.guidelines.tools.payloads import ArgumentError, respond

if TYPE_CHECKING:
    from medprompt.core.config.settings import Settings
    from medprompt.core.llm.models import LLMModel
    from medprompt.core.llm.registry import LLMRegistry
    from medprompt.core.storage.repository import SettingsRepository

logger = logging.getLogger(__name__)

_VALIDATORS = {
    "config": validate_app_config,
    "settings": validate_extended_settings,
    "preset": validate_tab_preset,
}


def register_prompt_tools(
    mcp: FastMCP,
    repository: SettingsRepository,
    registry: LLMRegistry,
    settings: Settings,
) -> None:
    """Register prompt generation tools on the MCP server."""
    copy_tracker = new_copy_tracker()

    def _resolve_model(provider_id: str, model_id: str) -> LLMModel | None:
        provider_id = provider_id or settings.medprompt_default_llm_provider
        if not model_id and provider_id == settings.medprompt_default_llm_provider:
            model_id = settings.medprompt_default_llm_model
        return registry.get_model(provider_id, model_id)

    def _config_from(config_json: str) -> AppConfig:
        if not config_json:
            return repository.load_config()
        config = parse_config_json(config_json)
        if config is None:
            raise ArgumentError("config_json is not a configuration (JSON object with activeTab)")
        return config

    @mcp.tool
    async def generate_guideline_prompt(
        ctx: Context,
        provider_id: str = "",
        model_id: str = "",
        config_json: str = "",
    ) -> str:
        """Generate the guideline-retrieval prompt tailored to a chat service.

        Args:
            provider_id: Target service ('gemini', 'chatgpt', 'claude', 'perplexity',
                'copilot'). Defaults to the configured default provider.
            model_id: Model within the provider. Empty or unknown means the free model.
            config_json: Optional configuration JSON to use instead of the stored one.
        """
        model = _resolve_model(provider_id, model_id)
        if model is None:
            return respond(
                "error",
                message=f"Unknown provider {provider_id!r}.",
                providers=[p.id for p in registry.all()],
            )
        try:
            config = _config_from(config_json)
        except ArgumentError as exc:
            return respond("invalid", message=str(exc))

        rendered = render_for_model(config, repository.load_extended_settings(), model)
        result = rendered.to_dict()
        result["modelName"] = model.name
        result["hasWebBrowsing"] = model.has_web_browsing
        result["charCount"] = len(rendered.prompt)

        if settings.medprompt_lite_mode:
            result["prompt"] = add_watermark(rendered.prompt)
            result["lite"] = {
                **lite_notice(),
                "promptCopyAllowed": can_copy(SECTION_PROMPT, copy_tracker),
            }

        logger.info(
            "Generated prompt for %s/%s (%d chars)", model.provider, model.id, len(rendered.prompt)
        )
        return respond("ok", **result)

    @mcp.tool
    async def generate_search_queries(ctx: Context, config_json: str = "") -> str:
        """List ready-to-paste search queries for the current configuration.

        Args:
            config_json: Optional configuration JSON to use instead of the stored one.
        """
        try:
            config = _config_from(config_json)
        except ArgumentError as exc:
            return respond("invalid", message=str(exc))

        queries = build_search_queries(config, repository.load_extended_settings())
        extra = {}
        if settings.medprompt_lite_mode:
            extra["lite"] = {
                **lite_notice(),
                "queriesCopyAllowed": can_copy(SECTION_BASIC_QUERIES, copy_tracker),
            }
        return respond("ok", queries=queries, count=len(queries), **extra)

    @mcp.tool
    async def validate_config(ctx: Context, data_json: str, kind: str = "config") -> str:
        """Check a configuration, extended settings or preset document for shape errors.

        Args:
            data_json: The JSON document to check.
            kind: 'config', 'settings' or 'preset'.
        """
        validator = _VALIDATORS.get(kind)
        if validator is None:
            return respond("error", message=f"Unknown kind {kind!r}.", kinds=sorted(_VALIDATORS))
        try:
            data = json.loads(data_json)
        except (ValueError, RecursionError) as exc:
            return respond("invalid", errors=[f"<root>: invalid JSON: {exc}"])

        result = validator(data)
        if result.success:
            return respond("valid", kind=kind)
        return respond("invalid", kind=kind, errors=result.errors)

    @mcp.tool
    async def save_prompt_file(ctx: Context, provider_id: str = "", model_id: str = "") -> str:
        """Write the tailored prompt to a text file in the export directory.

        The file is named prompt_<date>_<provider>.txt.

        Args:
            provider_id: Target service. Defaults to the configured default provider.
            model_id: Model within the provider. Empty means the free model.
        """
        model = _resolve_model(provider_id, model_id)
        if model is None:
            return respond("error", message=f"Unknown provider {provider_id!r}.")

        config = repository.load_config()
        rendered = render_for_model(config, repository.load_extended_settings(), model)
        text = rendered.prompt
        if settings.medprompt_lite_mode:
            text = add_watermark(text)

        path = write_artifact(
            settings.medprompt_export_dir,
            prompt_filename(config.date_today, model.provider),
            text,
        )
        if path is None:
            return respond("error", message="Could not write the prompt file.")
        return respond("saved", path=str(path), charCount=len(text))
