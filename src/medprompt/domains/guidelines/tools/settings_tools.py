"""MCP tools for extended settings and user data: custom presets, option lists, bundles."""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

from medprompt.core.codec.artifacts import settings_bundle_filename, write_artifact
from medprompt.core.storage.repository import BundleImportError, OptionListError
from medprompt.core.template.defaults import TEMPLATE_BASE_DATE
from medprompt.core.template.presets import find_preset as find_builtin_preset
from medprompt.core.template.schemas import validate_extended_settings, validate_tab_preset
from medprompt.domains.guidelines.tools.payloads import ArgumentError, parse_json_object, respond

if TYPE_CHECKING:
    from medprompt.core.config.settings import Settings
    from medprompt.core.storage.repository import SettingsRepository

logger = logging.getLogger(__name__)

_SECTIONS = ("template", "search", "output", "ui")


def register_settings_tools(
    mcp: FastMCP,
    repository: SettingsRepository,
    settings: Settings,
) -> None:
    """Register extended-settings and data management tools on the MCP server."""

    @mcp.tool
    async def get_extended_settings(ctx: Context) -> str:
        """Return template wording, search rules, output rules and UI preferences."""
        return respond(
            "ok",
            settings=repository.load_extended_settings().to_dict(),
            templateBaseDate=TEMPLATE_BASE_DATE,
        )

    @mcp.tool
    async def update_extended_settings(ctx: Context, section: str, updates_json: str) -> str:
        """Update one section of the extended settings.

        The result is validated before saving; out-of-range values such as
        maxResults=500 are rejected with field-level errors.

        Args:
            section: 'template', 'search', 'output' or 'ui'.
            updates_json: JSON object of camelCase fields, e.g. '{"maxResults": 30}'.
        """
        if section not in _SECTIONS:
            return respond("error", message=f"Unknown section {section!r}.", sections=list(_SECTIONS))
        try:
            updates = parse_json_object(updates_json, "updates_json")
        except ArgumentError as exc:
            return respond("invalid", message=str(exc))

        current = repository.load_extended_settings().to_dict()
        candidate = {**current, section: {**current[section], **updates}}
        result = validate_extended_settings(candidate)
        if not result.success:
            return respond("invalid", errors=result.errors)

        saved = repository.save_extended_settings(result.data)
        return respond("updated", settings=saved.to_dict())

    @mcp.tool
    async def export_settings_bundle(ctx: Context, save_file: bool = False) -> str:
        """Export extended settings and every custom list as one bundle.

        Args:
            save_file: Also write medai-settings-<date>.json to the export directory.
        """
        bundle = repository.export_bundle()
        if not save_file:
            return respond("ok", bundle=bundle)

        text = json.dumps(bundle, ensure_ascii=False, indent=2)
        path = write_artifact(settings.medprompt_export_dir, settings_bundle_filename(), text)
        if path is None:
            return respond("error", message="Could not write the settings file.", bundle=bundle)
        return respond("saved", bundle=bundle, path=str(path))

    @mcp.tool
    async def import_settings_bundle(ctx: Context, bundle_json: str) -> str:
        """Import a settings bundle produced by export_settings_bundle.

        Args:
            bundle_json: The bundle JSON (version 2 with extendedSettings).
        """
        try:
            data = json.loads(bundle_json)
            result = repository.import_bundle(data)
        except (ValueError, RecursionError, BundleImportError) as exc:
            logger.warning("Settings bundle rejected: %s", exc)
            return respond("invalid", message="Invalid settings file.", detail=str(exc))
        return respond("imported", **result.to_dict())

    @mcp.tool
    async def reset_all_settings(ctx: Context, confirm: str = "") -> str:
        """Restore default extended settings and delete all custom presets and lists.

        Args:
            confirm: Must be exactly 'RESET_ALL' to proceed. Safety gate.
        """
        if confirm != "RESET_ALL":
            return respond(
                "cancelled",
                message=(
                    "To reset all settings, call this tool with confirm='RESET_ALL'. "
                    "Custom presets, domains, scopes and audiences will be deleted."
                ),
            )
        saved = repository.reset_all()
        logger.warning("All settings reset by request")
        return respond("reset", settings=saved.to_dict())

    @mcp.tool
    async def save_custom_preset(ctx: Context, preset_json: str) -> str:
        """Create or replace a custom purpose preset.

        Saving under a built-in preset id stores an edited copy under a new
        custom id; built-in presets themselves never change.

        Args:
            preset_json: '{"id": ..., "name": ..., "categories": [...], "keywordChips": [...]}'.
                An empty id creates a new preset.
        """
        try:
            data = parse_json_object(preset_json, "preset_json")
        except ArgumentError as exc:
            return respond("invalid", errors=[str(exc)])

        if not data.get("id") or find_builtin_preset(data.get("id")):
            data["id"] = f"custom-{int(time.time() * 1000)}"
        data["name"] = str(data.get("name", "")).strip()
        for key in ("categories", "keywordChips"):
            if isinstance(data.get(key), list):
                data[key] = [s.strip() for s in data[key] if isinstance(s, str) and s.strip()]

        result = validate_tab_preset(data)
        if not result.success:
            return respond("invalid", errors=result.errors)

        preset = result.data
        presets = [p for p in repository.load_custom_presets() if p.id != preset.id]
        repository.save_custom_presets([*presets, preset])
        return respond("saved", preset=preset.to_dict())

    @mcp.tool
    async def delete_custom_preset(ctx: Context, preset_id: str) -> str:
        """Delete a custom purpose preset.

        Args:
            preset_id: Id of the custom preset.
        """
        presets = repository.load_custom_presets()
        remaining = [p for p in presets if p.id != preset_id]
        if len(remaining) == len(presets):
            return respond("not_found", message=f"No custom preset with id {preset_id!r}.")
        repository.save_custom_presets(remaining)
        return respond("deleted", preset_id=preset_id)

    @mcp.tool
    async def add_custom_option(ctx: Context, kind: str, value: str) -> str:
        """Add a custom priority domain, scope tag or audience.

        Args:
            kind: 'domain', 'scope' or 'audience'.
            value: The option to add.
        """
        try:
            custom = repository.add_custom_option(kind, value)
        except OptionListError as exc:
            return respond("error", message=str(exc))
        return respond("added", kind=kind, custom=custom, options=repository.all_options(kind))

    @mcp.tool
    async def remove_custom_option(ctx: Context, kind: str, value: str) -> str:
        """Remove a custom priority domain, scope tag or audience. Built-ins stay.

        Args:
            kind: 'domain', 'scope' or 'audience'.
            value: The option to remove.
        """
        try:
            custom = repository.remove_custom_option(kind, value)
        except OptionListError as exc:
            return respond("error", message=str(exc))
        return respond("removed", kind=kind, custom=custom, options=repository.all_options(kind))
