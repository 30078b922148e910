"""Shape validation for configuration, extended settings and presets.

The pydantic models accept the camelCase JSON produced by ``to_dict()`` and by
the browser version. Validation is strict (no string-to-bool coercion) so a
hand-edited file with ``"proofMode": "yes"`` is reported rather than guessed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from medprompt.core.template.models import AppConfig, ExtendedSettings, TabPreset

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        strict=True,
    )


# ---------------------------------------------------------------------------
# TabPreset
# ---------------------------------------------------------------------------

class TabPresetSchema(_WireModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    categories: list[str]
    keyword_chips: list[str]


# ---------------------------------------------------------------------------
# AppConfig
# ---------------------------------------------------------------------------

class CategoryItemSchema(_WireModel):
    name: str
    enabled: bool


class KeywordChipSchema(_WireModel):
    name: str
    enabled: bool


class AppConfigSchema(_WireModel):
    date_today: str
    query: str
    scope: list[str]
    audiences: list[str]

    three_ministry_guidelines: bool
    official_domain_priority: bool
    site_operator: bool
    latest_version_priority: bool
    pdf_direct_link: bool
    include_search_log: bool
    e_gov_cross_reference: bool
    proof_mode: bool

    categories: list[CategoryItemSchema]
    keyword_chips: list[KeywordChipSchema]
    custom_keywords: list[str]
    exclude_keywords: list[str]
    priority_domains: list[str]

    active_tab: str


# ---------------------------------------------------------------------------
# ExtendedSettings
# ---------------------------------------------------------------------------

class OutputSectionSchema(_WireModel):
    id: str
    name: str
    enabled: bool
    order: float


class TemplateSettingsSchema(_WireModel):
    role_title: str
    role_description: str
    disclaimers: list[str]
    output_sections: list[OutputSectionSchema]
    custom_instructions: str


class SearchSettingsSchema(_WireModel):
    use_site_operator: bool
    use_filetype_operator: bool
    filetypes: list[str]
    priority_rule: Literal["published_date", "revised_date", "relevance"]
    excluded_domains: list[str]
    max_results: float = Field(ge=1, le=100)
    recursive_depth: float = Field(ge=0, le=10)


class OutputSettingsSchema(_WireModel):
    language_mode: Literal["japanese_only", "mixed", "english_priority"]
    include_english_terms: bool
    detail_level: Literal["concise", "standard", "detailed"]
    e_gov_cross_reference: bool
    include_law_excerpts: bool
    output_format: Literal["markdown", "plain_text"]
    include_search_log: bool


class UISettingsSchema(_WireModel):
    theme: Literal["light", "dark", "system"]
    font_size: Literal["small", "medium", "large"]
    default_output_tab: Literal["prompt", "queries", "json"]
    default_purpose_tab: str
    compact_mode: bool
    show_tooltips: bool
    animations_enabled: bool


class ExtendedSettingsSchema(_WireModel):
    template: TemplateSettingsSchema
    search: SearchSettingsSchema
    output: OutputSettingsSchema
    ui: UISettingsSchema
    version: float
    last_updated: str


# ---------------------------------------------------------------------------
# Validation entry points
# ---------------------------------------------------------------------------

@dataclass
class ValidationResult(Generic[T]):
    """Outcome of validating untrusted data.

    ``errors`` holds ``"<dotted.path>: <message>"`` strings, e.g.
    ``"search.maxResults: Input should be less than or equal to 100"``.
    """

    success: bool
    data: T | None = None
    errors: list[str] = field(default_factory=list)


def format_errors(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"]) or "<root>"
        messages.append(f"{path}: {error['msg']}")
    return messages


def _validate(schema: type[_WireModel], data: Any) -> tuple[dict[str, Any] | None, list[str]]:
    try:
        model = schema.model_validate(data)
    except ValidationError as exc:
        return None, format_errors(exc)
    return model.model_dump(by_alias=True), []


def validate_app_config(data: Any) -> ValidationResult[AppConfig]:
    payload, errors = _validate(AppConfigSchema, data)
    if payload is None:
        return ValidationResult(success=False, errors=errors)
    return ValidationResult(success=True, data=AppConfig.from_dict(payload))


def validate_extended_settings(data: Any) -> ValidationResult[ExtendedSettings]:
    payload, errors = _validate(ExtendedSettingsSchema, data)
    if payload is None:
        return ValidationResult(success=False, errors=errors)
    return ValidationResult(success=True, data=ExtendedSettings.from_dict(payload))


def validate_tab_preset(data: Any) -> ValidationResult[TabPreset]:
    payload, errors = _validate(TabPresetSchema, data)
    if payload is None:
        return ValidationResult(success=False, errors=errors)
    return ValidationResult(success=True, data=TabPreset.from_dict(payload))


def parse_app_config(data: Any) -> AppConfig | None:
    result = validate_app_config(data)
    if not result.success:
        logger.warning("AppConfig validation failed: %s", result.errors)
    return result.data


def parse_extended_settings(data: Any) -> ExtendedSettings | None:
    result = validate_extended_settings(data)
    if not result.success:
        logger.warning("ExtendedSettings validation failed: %s", result.errors)
    return result.data


def parse_tab_preset(data: Any) -> TabPreset | None:
    result = validate_tab_preset(data)
    if not result.success:
        logger.warning("TabPreset validation failed: %s", result.errors)
    return result.data
