"""MCP tools for the working configuration: edit, presets, JSON and share links."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from medprompt.core.codec.artifacts import config_filename, write_artifact
from medprompt.core.codec.share_link import (
    MAX_SHARE_URL_LENGTH,
    config_to_json,
    decode_config_from_url,
    encode_config_to_url,
    parse_config_json,
)
from medprompt.core.template.presets import apply_preset, create_default_config, find_preset
from medprompt.domains.guidelines.tools.payloads import ArgumentError, parse_json_object, respond

if TYPE_CHECKING:
    from medprompt.core.config.settings import Settings
    from medprompt.core.storage.repository import SettingsRepository

logger = logging.getLogger(__name__)

_TOGGLE_KINDS = ("scope", "audience", "category", "keyword")


def register_config_tools(
    mcp: FastMCP,
    repository: SettingsRepository,
    settings: Settings,
) -> None:
    """Register configuration and share-link tools on the MCP server."""

    @mcp.tool
    async def get_config(ctx: Context) -> str:
        """Return the stored configuration (theme, scope, switches, keywords, domains)."""
        return respond("ok", config=repository.load_config().to_dict())

    @mcp.tool
    async def update_config(
        ctx: Context,
        updates_json: str = "{}",
        custom_keywords_text: str | None = None,
    ) -> str:
        """Apply field updates to the stored configuration.

        Args:
            updates_json: JSON object of camelCase fields to replace, e.g.
                '{"query": "遠隔医療", "proofMode": true}'.
            custom_keywords_text: Optional free text; one custom keyword per line.
        """
        try:
            updates = parse_json_object(updates_json, "updates_json")
        except ArgumentError as exc:
            return respond("invalid", message=str(exc))

        config = repository.load_config().merged(updates)
        if custom_keywords_text is not None:
            config = config.set_custom_keywords(custom_keywords_text)
        repository.save_config(config)
        return respond("updated", config=config.to_dict())

    @mcp.tool
    async def toggle_config_item(ctx: Context, kind: str, name: str) -> str:
        """Toggle a scope tag, audience, category or keyword chip on or off.

        Args:
            kind: 'scope', 'audience', 'category' or 'keyword'.
            name: The tag, category or keyword chip name.
        """
        config = repository.load_config()
        if kind == "scope":
            config = config.toggle_scope(name)
        elif kind == "audience":
            config = config.toggle_audience(name)
        elif kind in ("category", "keyword"):
            items = config.categories if kind == "category" else config.keyword_chips
            index = next((i for i, item in enumerate(items) if item.name == name), None)
            if index is None:
                return respond("not_found", message=f"No {kind} named {name!r}.")
            if kind == "category":
                config = config.toggle_category(index)
            else:
                config = config.toggle_keyword_chip(index)
        else:
            return respond("error", message=f"Unknown kind {kind!r}.", kinds=list(_TOGGLE_KINDS))

        repository.save_config(config)
        return respond("updated", config=config.to_dict())

    @mcp.tool
    async def switch_preset(ctx: Context, preset_id: str) -> str:
        """Switch the purpose preset, replacing categories and keyword chips.

        Args:
            preset_id: Built-in preset ('medical-ai', 'generative-ai', 'samd',
                'data-utilization', 'security') or a custom preset id.
        """
        preset = find_preset(preset_id, repository.load_custom_presets())
        if preset is None:
            return respond("not_found", message=f"No preset with id {preset_id!r}.")
        config = apply_preset(repository.load_config(), preset)
        repository.save_config(config)
        return respond("switched", preset=preset.to_dict(), config=config.to_dict())

    @mcp.tool
    async def reset_config(ctx: Context) -> str:
        """Reset the configuration to its defaults (dated today)."""
        config = create_default_config(custom_presets=repository.load_custom_presets())
        repository.save_config(config)
        return respond("reset", config=config.to_dict())

    @mcp.tool
    async def export_config_json(ctx: Context, save_file: bool = False) -> str:
        """Export the configuration as JSON, optionally writing config_<date>.json.

        Args:
            save_file: Also write the JSON to the export directory.
        """
        config = repository.load_config()
        text = config_to_json(config)
        if not save_file:
            return respond("ok", json=text)

        path = write_artifact(settings.medprompt_export_dir, config_filename(config.date_today), text)
        if path is None:
            return respond("error", message="Could not write the config file.", json=text)
        return respond("saved", json=text, path=str(path))

    @mcp.tool
    async def import_config_json(ctx: Context, config_json: str) -> str:
        """Replace the stored configuration with one from exported JSON.

        Args:
            config_json: JSON previously produced by export_config_json.
        """
        config = parse_config_json(config_json)
        if config is None:
            return respond("invalid", message="Invalid configuration file.")
        repository.save_config(config)
        return respond("imported", config=config.to_dict())

    @mcp.tool
    async def create_share_link(ctx: Context, base_url: str = "") -> str:
        """Encode the configuration into a share link.

        Args:
            base_url: Page URL to append ?c=... to. Defaults to the configured one.
        """
        config = repository.load_config()
        url = encode_config_to_url(config, base_url or settings.medprompt_share_base_url)
        if not url:
            return respond("error", message="Could not encode the configuration.")
        too_long = len(url) > MAX_SHARE_URL_LENGTH
        if too_long:
            logger.info("Share link is %d chars (limit %d)", len(url), MAX_SHARE_URL_LENGTH)
        return respond("ok", url=url, length=len(url), tooLong=too_long)

    @mcp.tool
    async def open_share_link(ctx: Context, url: str, apply: bool = True) -> str:
        """Decode a share link; by default the decoded configuration replaces the stored one.

        Args:
            url: Share link containing a c= parameter.
            apply: Save the decoded configuration.
        """
        config = decode_config_from_url(url)
        if config is None:
            return respond("invalid", message="The link does not carry a configuration.")
        if apply:
            repository.save_config(config)
        return respond("applied" if apply else "decoded", config=config.to_dict())
