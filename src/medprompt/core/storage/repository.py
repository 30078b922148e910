"""Settings repository: persisted configuration, extended settings and custom lists.

Each persisted item is an independent JSON blob under its own key, so a
corrupted blob only ever resets itself to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from medprompt.core.storage.store import KeyValueStore
from medprompt.core.template.defaults import (
    DEFAULT_AUDIENCE_OPTIONS,
    DEFAULT_PRIORITY_DOMAINS,
    DEFAULT_SCOPE_OPTIONS,
    EXTENDED_SETTINGS_VERSION,
)
from medprompt.core.template.models import (
    AppConfig,
    ExtendedSettings,
    TabPreset,
    default_output_sections,
)
from medprompt.core.template.presets import create_default_config

logger = logging.getLogger(__name__)

EXTENDED_SETTINGS_KEY = "medai_extended_settings_v2"
CONFIG_KEY = "medai_config_v1"
CUSTOM_PRESETS_KEY = "medai_custom_presets_v1"
CUSTOM_DOMAINS_KEY = "medai_custom_domains_v1"
CUSTOM_SCOPES_KEY = "medai_custom_scopes_v1"
CUSTOM_AUDIENCES_KEY = "medai_custom_audiences_v1"

BUNDLE_VERSION = 2

# Option kind -> (storage key, built-in options that cannot be removed)
OPTION_LISTS: dict[str, tuple[str, tuple[str, ...]]] = {
    "domain": (CUSTOM_DOMAINS_KEY, DEFAULT_PRIORITY_DOMAINS),
    "scope": (CUSTOM_SCOPES_KEY, DEFAULT_SCOPE_OPTIONS),
    "audience": (CUSTOM_AUDIENCES_KEY, DEFAULT_AUDIENCE_OPTIONS),
}

# Bundle field -> storage key
_BUNDLE_LISTS = {
    "customDomains": CUSTOM_DOMAINS_KEY,
    "customScopes": CUSTOM_SCOPES_KEY,
    "customAudiences": CUSTOM_AUDIENCES_KEY,
}


class RepositoryError(Exception):
    """Raised when repository operations fail."""


class BundleImportError(RepositoryError):
    """Raised when a settings bundle cannot be imported."""


class OptionListError(RepositoryError):
    """Raised when a custom option edit is refused."""


@dataclass
class ImportResult:
    """What an ``import_bundle`` call applied."""

    extended_settings: bool = False
    applied: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"extendedSettings": self.extended_settings, "applied": list(self.applied)}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SettingsRepository:
    """Load/save operations over a ``KeyValueStore``.

    Usage::

        repo = SettingsRepository(InMemoryKeyValueStore())
        settings = repo.load_extended_settings()
        repo.save_extended_settings(update_search(settings, {"maxResults": 30}))
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Raw JSON blobs
    # ------------------------------------------------------------------

    def _load_json(self, key: str) -> Any:
        raw = self._store.load(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning("Stored value for %s is not valid JSON; using defaults", key)
            return None

    def _save_json(self, key: str, value: Any) -> None:
        self._store.save(key, json.dumps(value, ensure_ascii=False))

    # ------------------------------------------------------------------
    # Extended settings
    # ------------------------------------------------------------------

    def load_extended_settings(self) -> ExtendedSettings:
        """Stored settings merged over defaults; defaults when nothing usable is stored."""
        data = self._load_json(EXTENDED_SETTINGS_KEY)
        if data is None:
            return ExtendedSettings()
        if not isinstance(data, dict):
            logger.warning("Stored extended settings are not an object; using defaults")
            return ExtendedSettings()

        settings = ExtendedSettings.from_dict(data)
        settings = replace(
            settings,
            template=replace(
                settings.template,
                output_sections=_merge_sections(settings.template.output_sections),
            ),
        )

        if settings.version < EXTENDED_SETTINGS_VERSION:
            logger.info(
                "Upgrading stored extended settings from version %d to %d",
                settings.version,
                EXTENDED_SETTINGS_VERSION,
            )
            settings = replace(settings, version=EXTENDED_SETTINGS_VERSION)
        return settings

    def save_extended_settings(self, settings: ExtendedSettings) -> ExtendedSettings:
        """Persist ``settings`` stamped with the current time; returns the saved record."""
        saved = replace(settings, version=EXTENDED_SETTINGS_VERSION, last_updated=_now_iso())
        self._save_json(EXTENDED_SETTINGS_KEY, saved.to_dict())
        return saved

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def load_config(self, date_today: str | None = None) -> AppConfig:
        """Stored configuration, or a fresh default one.

        ``date_today`` is always refreshed so a stored session never renders
        with a stale date.
        """
        data = self._load_json(CONFIG_KEY)
        default = create_default_config(
            date_today=date_today, custom_presets=self.load_custom_presets()
        )
        if not isinstance(data, dict):
            return default
        stored = AppConfig.from_dict({**default.to_dict(), **data})
        return replace(stored, date_today=default.date_today)

    def save_config(self, config: AppConfig) -> None:
        self._save_json(CONFIG_KEY, config.to_dict())

    # ------------------------------------------------------------------
    # Custom presets and option lists
    # ------------------------------------------------------------------

    def load_custom_presets(self) -> list[TabPreset]:
        data = self._load_json(CUSTOM_PRESETS_KEY)
        if not isinstance(data, list):
            return []
        return [p for p in map(TabPreset.from_dict, data) if p]

    def save_custom_presets(self, presets: list[TabPreset]) -> None:
        self._save_json(CUSTOM_PRESETS_KEY, [p.to_dict() for p in presets])

    def load_custom_list(self, key: str) -> list[str]:
        data = self._load_json(key)
        if not isinstance(data, list):
            return []
        return [item for item in data if isinstance(item, str)]

    def save_custom_list(self, key: str, items: list[str]) -> None:
        self._save_json(key, list(items))

    def all_options(self, kind: str) -> list[str]:
        """Built-in options followed by the user's custom ones."""
        key, builtin = _option_list(kind)
        return [*builtin, *self.load_custom_list(key)]

    def add_custom_option(self, kind: str, value: str) -> list[str]:
        """Append a custom option; returns the updated custom list.

        Raises:
            OptionListError: If the value is blank or already present.
        """
        key, _ = _option_list(kind)
        value = value.strip()
        if not value:
            raise OptionListError(f"Empty {kind} option")
        if value in self.all_options(kind):
            raise OptionListError(f"{kind} option already registered: {value!r}")
        items = [*self.load_custom_list(key), value]
        self.save_custom_list(key, items)
        return items

    def remove_custom_option(self, kind: str, value: str) -> list[str]:
        """Remove a custom option; returns the updated custom list.

        Raises:
            OptionListError: If the value is a built-in option or is not present.
        """
        key, builtin = _option_list(kind)
        if value in builtin:
            raise OptionListError(f"Built-in {kind} option cannot be removed: {value!r}")
        items = self.load_custom_list(key)
        if value not in items:
            raise OptionListError(f"Unknown custom {kind} option: {value!r}")
        items = [i for i in items if i != value]
        self.save_custom_list(key, items)
        return items

    # ------------------------------------------------------------------
    # Export / import / reset
    # ------------------------------------------------------------------

    def export_bundle(self, export_date: str | None = None) -> dict[str, Any]:
        return {
            "version": BUNDLE_VERSION,
            "exportDate": export_date or _now_iso(),
            "extendedSettings": self.load_extended_settings().to_dict(),
            "customPresets": [p.to_dict() for p in self.load_custom_presets()],
            "customDomains": self.load_custom_list(CUSTOM_DOMAINS_KEY),
            "customScopes": self.load_custom_list(CUSTOM_SCOPES_KEY),
            "customAudiences": self.load_custom_list(CUSTOM_AUDIENCES_KEY),
        }

    def import_bundle(self, data: Any) -> ImportResult:
        """Apply a settings bundle; list fields are applied only when present.

        Raises:
            BundleImportError: If the bundle is not a version 2 bundle with
                ``extendedSettings``.
        """
        if not isinstance(data, dict):
            raise BundleImportError("Settings bundle must be a JSON object")
        if data.get("version") != BUNDLE_VERSION:
            raise BundleImportError(f"Unsupported bundle version: {data.get('version')!r}")
        if not isinstance(data.get("extendedSettings"), dict):
            raise BundleImportError("Settings bundle has no extendedSettings")

        result = ImportResult()
        settings = ExtendedSettings.from_dict(data["extendedSettings"])
        self.save_extended_settings(settings)
        result.extended_settings = True

        presets = data.get("customPresets")
        if isinstance(presets, list):
            self.save_custom_presets([p for p in map(TabPreset.from_dict, presets) if p])
            result.applied.append("customPresets")

        for field_name, key in _BUNDLE_LISTS.items():
            items = data.get(field_name)
            if isinstance(items, list):
                self.save_custom_list(key, [i for i in items if isinstance(i, str)])
                result.applied.append(field_name)

        logger.info("Imported settings bundle (lists: %s)", ", ".join(result.applied) or "none")
        return result

    def reset_all(self) -> ExtendedSettings:
        """Restore default extended settings and clear every custom list."""
        settings = self.save_extended_settings(ExtendedSettings())
        for key in (CUSTOM_PRESETS_KEY, CUSTOM_DOMAINS_KEY, CUSTOM_SCOPES_KEY, CUSTOM_AUDIENCES_KEY):
            self._store.delete(key)
        logger.info("All settings reset to defaults")
        return settings


def _option_list(kind: str) -> tuple[str, tuple[str, ...]]:
    try:
        return OPTION_LISTS[kind]
    except KeyError:
        raise OptionListError(
            f"Unknown option kind {kind!r}; expected one of {sorted(OPTION_LISTS)}"
        ) from None


def _merge_sections(stored):
    """Keep stored sections by id; append default sections the stored list lacks."""
    seen = {s.id for s in stored}
    merged = list(stored)
    for section in default_output_sections():
        if section.id not in seen:
            merged.append(section)
    return merged
