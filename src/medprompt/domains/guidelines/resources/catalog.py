"""MCP Resources for LLM catalogue and purpose preset discovery."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import FastMCP

from medprompt.core.template.presets import TAB_PRESETS

if TYPE_CHECKING:
    from medprompt.core.llm.registry import LLMRegistry
    from medprompt.core.storage.repository import SettingsRepository


def register_catalog_resources(
    mcp: FastMCP,
    registry: LLMRegistry,
    repository: SettingsRepository,
) -> None:
    """Register catalogue discovery resources on the MCP server."""

    @mcp.resource("llm://providers")
    def llm_providers_resource() -> str:
        """Discover the chat services a prompt can be tailored to."""
        providers = registry.all()
        return json.dumps(
            {
                "provider_count": len(providers),
                "providers": [
                    {
                        "id": p.id,
                        "name": p.name,
                        "description": p.description,
                        "free_model": p.free_model.id,
                        "paid_models": [m.id for m in p.paid_models],
                    }
                    for p in providers
                ],
            },
            ensure_ascii=False,
            indent=2,
        )

    @mcp.resource("llm://providers/{provider_id}")
    def llm_provider_resource(provider_id: str) -> str:
        """Full details for one provider, with its free/paid feature comparison."""
        provider = registry.get_provider(provider_id)
        if provider is None:
            return json.dumps(
                {"error": f"Unknown provider {provider_id!r}", "providers": [p.id for p in registry.all()]}
            )
        return json.dumps(
            {
                **provider.to_dict(),
                "freePaidDiff": registry.get_free_paid_diff(provider_id).to_dict(),
            },
            ensure_ascii=False,
            indent=2,
        )

    @mcp.resource("preset://tabs")
    def preset_tabs_resource() -> str:
        """Built-in and custom purpose presets."""
        return json.dumps(
            {
                "builtin": [p.to_dict() for p in TAB_PRESETS],
                "custom": [p.to_dict() for p in repository.load_custom_presets()],
            },
            ensure_ascii=False,
            indent=2,
        )
