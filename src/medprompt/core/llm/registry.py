"""LLM registry: in-memory index of the provider catalogue."""

from __future__ import annotations

import logging

from medprompt.core.llm.models import FreePaidDiff, LLMModel, LLMProviderInfo

logger = logging.getLogger(__name__)

DEFAULT_LLM_PROVIDER = "gemini"
DEFAULT_LLM_MODEL = "gemini-2-flash"


class LLMRegistry:
    """Providers by id, in registration order."""

    def __init__(self) -> None:
        self._providers: dict[str, LLMProviderInfo] = {}

    def register(self, provider: LLMProviderInfo) -> None:
        if provider.id in self._providers:
            raise ValueError(f"Duplicate LLM provider id registered: {provider.id!r}")
        self._providers[provider.id] = provider

    def get_provider(self, provider_id: str) -> LLMProviderInfo | None:
        return self._providers.get(provider_id)

    def get_model(self, provider_id: str, model_id: str = "") -> LLMModel | None:
        """Look up a model; an empty or unknown ``model_id`` gives the free model.

        Returns ``None`` only when the provider itself is unknown.
        """
        provider = self.get_provider(provider_id)
        if provider is None:
            return None
        if not model_id or provider.free_model.id == model_id:
            return provider.free_model
        for model in provider.paid_models:
            if model.id == model_id:
                return model
        logger.debug("Unknown model %r for %s, using free model", model_id, provider_id)
        return provider.free_model

    def get_free_paid_diff(self, provider_id: str) -> FreePaidDiff:
        """Features only paid models offer, in order of first appearance."""
        provider = self.get_provider(provider_id)
        if provider is None:
            return FreePaidDiff()

        free_features = provider.free_model.features
        paid_features: list[str] = []
        for model in provider.paid_models:
            for feature in model.features:
                if feature not in paid_features:
                    paid_features.append(feature)

        return FreePaidDiff(
            free_features=free_features,
            paid_only_features=tuple(f for f in paid_features if f not in free_features),
            free_limitations=provider.free_model.limitations,
        )

    def all(self) -> list[LLMProviderInfo]:
        return list(self._providers.values())
