"""Catalogue records for the chat services a prompt can be tailored to."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Tier = Literal["free", "paid"]


@dataclass(frozen=True)
class PromptAdjustments:
    """How the base prompt is rewritten for a model's capability gaps.

    ``recursive_depth`` of ``None`` leaves the prompt's depth annotation alone.
    """

    remove_egov_api: bool = False
    simplify_instructions: bool = False
    recursive_depth: int | None = None
    add_search_tips: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "removeEgovApi": self.remove_egov_api,
            "simplifyInstructions": self.simplify_instructions,
            "addSearchTips": self.add_search_tips,
        }
        if self.recursive_depth is not None:
            data["recursiveDepth"] = self.recursive_depth
        return data


@dataclass(frozen=True)
class LLMModel:
    id: str
    name: str
    provider: str
    tier: Tier
    has_web_browsing: bool
    max_tokens: int
    context_window: int
    features: tuple[str, ...] = ()
    limitations: tuple[str, ...] = ()
    tips: tuple[str, ...] = ()
    prompt_adjustments: PromptAdjustments | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider,
            "tier": self.tier,
            "hasWebBrowsing": self.has_web_browsing,
            "maxTokens": self.max_tokens,
            "contextWindow": self.context_window,
            "features": list(self.features),
            "limitations": list(self.limitations),
            "tips": list(self.tips),
            "promptAdjustments": (
                self.prompt_adjustments.to_dict() if self.prompt_adjustments else None
            ),
        }


@dataclass(frozen=True)
class LLMProviderInfo:
    """A chat service: exactly one free model plus its paid models in display order."""

    id: str
    name: str
    icon: str
    color: str
    description: str
    free_model: LLMModel
    paid_models: tuple[LLMModel, ...] = field(default_factory=tuple)

    def models(self) -> list[LLMModel]:
        return [self.free_model, *self.paid_models]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "color": self.color,
            "description": self.description,
            "freeModel": self.free_model.to_dict(),
            "paidModels": [m.to_dict() for m in self.paid_models],
        }


@dataclass(frozen=True)
class FreePaidDiff:
    free_features: tuple[str, ...] = ()
    paid_only_features: tuple[str, ...] = ()
    free_limitations: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "freeFeatures": list(self.free_features),
            "paidOnlyFeatures": list(self.paid_only_features),
            "freeLimitations": list(self.free_limitations),
        }
