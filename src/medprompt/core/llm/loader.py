"""LLM catalogue loader: reads provider definitions from YAML."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from medprompt.core.llm.models import LLMModel, LLMProviderInfo, PromptAdjustments
from medprompt.core.llm.registry import LLMRegistry

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = (
    Path(__file__).resolve().parents[2] / "domains" / "guidelines" / "catalog" / "llm_providers.yaml"
)


def load_llm_catalog(path: str | Path, registry: LLMRegistry) -> int:
    """Register every provider in a catalogue file.

    Returns the number of providers loaded. A provider entry that fails to
    parse is logged and skipped; the rest still load.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning("LLM catalogue does not exist: %s", path)
        return 0

    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = yaml.safe_load(f) or {}

    count = 0
    for entry in data.get("providers", []):
        try:
            provider = parse_provider(entry)
            registry.register(provider)
            count += 1
            logger.info(
                "Loaded LLM provider: %s (%d models)", provider.id, len(provider.models())
            )
        except Exception:
            logger.exception("Failed to load LLM provider entry %r", entry.get("id"))
    return count


def load_default_registry() -> LLMRegistry:
    registry = LLMRegistry()
    load_llm_catalog(DEFAULT_CATALOG_PATH, registry)
    return registry


def parse_provider(data: dict[str, Any]) -> LLMProviderInfo:
    provider_id = data["id"]
    return LLMProviderInfo(
        id=provider_id,
        name=data["name"],
        icon=data.get("icon", ""),
        color=data.get("color", ""),
        description=data.get("description", "").strip(),
        free_model=parse_model(data["free_model"], provider_id, "free"),
        paid_models=tuple(
            parse_model(m, provider_id, "paid") for m in data.get("paid_models", [])
        ),
    )


def parse_model(data: dict[str, Any], provider_id: str, tier: str) -> LLMModel:
    adjustments = data.get("prompt_adjustments")
    return LLMModel(
        id=data["id"],
        name=data["name"],
        provider=provider_id,
        tier=tier,  # type: ignore[arg-type]
        has_web_browsing=bool(data.get("has_web_browsing", False)),
        max_tokens=int(data.get("max_tokens", 0)),
        context_window=int(data.get("context_window", 0)),
        features=tuple(data.get("features", [])),
        limitations=tuple(data.get("limitations", [])),
        tips=tuple(data.get("tips", [])),
        prompt_adjustments=parse_adjustments(adjustments) if adjustments else None,
    )


def parse_adjustments(data: dict[str, Any]) -> PromptAdjustments:
    depth = data.get("recursive_depth")
    return PromptAdjustments(
        remove_egov_api=bool(data.get("remove_egov_api", False)),
        simplify_instructions=bool(data.get("simplify_instructions", False)),
        recursive_depth=int(depth) if depth is not None else None,
        add_search_tips=bool(data.get("add_search_tips", False)),
    )
