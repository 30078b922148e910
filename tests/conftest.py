"""Shared test fixtures for the guideline prompt builder tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MEDPROMPT_DB_PATH", ":memory:")
    monkeypatch.setenv("MEDPROMPT_EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setenv("MEDPROMPT_LITE_MODE", "false")
    monkeypatch.setenv("MEDPROMPT_DEFAULT_LLM_PROVIDER", "gemini")
    monkeypatch.setenv("MEDPROMPT_DEFAULT_LLM_MODEL", "gemini-2-flash")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from medprompt.core.llm.loader import load_default_registry  # noqa: E402
from medprompt.core.llm.models import LLMModel, LLMProviderInfo, PromptAdjustments  # noqa: E402
from medprompt.core.llm.registry import LLMRegistry  # noqa: E402
from medprompt.core.storage.repository import SettingsRepository  # noqa: E402
from medprompt.core.storage.store import InMemoryKeyValueStore  # noqa: E402
from medprompt.core.template.models import (  # noqa: E402
    AppConfig,
    CategoryItem,
    ExtendedSettings,
    KeywordChip,
)
from medprompt.core.template.presets import create_default_config  # noqa: E402

TEST_DATE = "2026-01-20"


def make_test_config(**overrides) -> AppConfig:
    """Create a default configuration dated TEST_DATE, with field overrides."""
    config = create_default_config(date_today=TEST_DATE)
    for name, value in overrides.items():
        setattr(config, name, value)
    return config


def make_empty_config(**overrides) -> AppConfig:
    """A configuration with every list empty and every switch off."""
    config = AppConfig(
        date_today=TEST_DATE,
        three_ministry_guidelines=False,
        official_domain_priority=False,
        site_operator=False,
        latest_version_priority=False,
        pdf_direct_link=False,
        include_search_log=False,
        e_gov_cross_reference=False,
        proof_mode=False,
    )
    for name, value in overrides.items():
        setattr(config, name, value)
    return config


def make_test_settings(**section_updates) -> ExtendedSettings:
    """Default extended settings with camelCase updates per section.

    ``make_test_settings(search={"maxResults": 3})``
    """
    settings = ExtendedSettings()
    for section, updates in section_updates.items():
        settings = settings.merged(section, updates)
    return settings


def make_test_model(
    id: str = "test-model",
    provider: str = "testai",
    tier: str = "free",
    has_web_browsing: bool = True,
    features: tuple[str, ...] = ("A", "B"),
    adjustments: PromptAdjustments | None = None,
) -> LLMModel:
    """Create a catalogue model with sensible defaults."""
    return LLMModel(
        id=id,
        name=f"Test: {id}",
        provider=provider,
        tier=tier,
        has_web_browsing=has_web_browsing,
        max_tokens=4096,
        context_window=32000,
        features=features,
        limitations=("limited",),
        tips=("tip",),
        prompt_adjustments=adjustments,
    )


def make_test_provider(
    id: str = "testai",
    free_features: tuple[str, ...] = ("A", "B"),
    paid_features: tuple[tuple[str, ...], ...] = (("A", "C"), ("B", "C", "D")),
) -> LLMProviderInfo:
    return LLMProviderInfo(
        id=id,
        name=f"Test provider {id}",
        icon="*",
        color="#000000",
        description="test",
        free_model=make_test_model(id=f"{id}-free", provider=id, features=free_features),
        paid_models=tuple(
            make_test_model(id=f"{id}-paid-{i}", provider=id, tier="paid", features=f)
            for i, f in enumerate(paid_features)
        ),
    )


def chips(*names: str, enabled: bool = True) -> list[KeywordChip]:
    return [KeywordChip(name=n, enabled=enabled) for n in names]


def categories(*names: str, enabled: bool = True) -> list[CategoryItem]:
    return [CategoryItem(name=n, enabled=enabled) for n in names]


@pytest.fixture
def config() -> AppConfig:
    return make_test_config()


@pytest.fixture
def settings() -> ExtendedSettings:
    return ExtendedSettings()


@pytest.fixture
def llm_registry() -> LLMRegistry:
    """Registry loaded from the packaged catalogue."""
    return load_default_registry()


@pytest.fixture
def test_registry() -> LLMRegistry:
    reg = LLMRegistry()
    reg.register(make_test_provider())
    return reg


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def settings_repository(kv_store: InMemoryKeyValueStore) -> SettingsRepository:
    return SettingsRepository(kv_store)


@pytest.fixture
def settings_db():
    """Create an in-memory SettingsDatabase for testing."""
    from medprompt.core.storage.database import SettingsDatabase

    db = SettingsDatabase(":memory:")
    db.initialize()
    yield db
    db.close()
