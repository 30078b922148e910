"""Data models for the prompt configuration and the extended template settings.

Attributes are snake_case; ``to_dict()`` emits the camelCase keys used by the
browser version's JSON (``dateToday``, ``eGovCrossReference``, ...) so exported
files and share links stay interchangeable. ``from_dict()`` is lenient: any
missing or mistyped field falls back to its default.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Literal

from medprompt.core.template.defaults import (
    DEFAULT_FILETYPES,
    DEFAULT_MAX_RESULTS,
    DEFAULT_OUTPUT_SECTIONS,
    DEFAULT_PURPOSE_TAB,
    DEFAULT_RECURSIVE_DEPTH,
    DEFAULT_ROLE_DESCRIPTION,
    DEFAULT_ROLE_TITLE,
    DISCLAIMER_LINES,
    EXTENDED_SETTINGS_VERSION,
)

PriorityRule = Literal["published_date", "revised_date", "relevance"]
LanguageMode = Literal["japanese_only", "mixed", "english_priority"]
DetailLevel = Literal["concise", "standard", "detailed"]
OutputFormat = Literal["markdown", "plain_text"]
Theme = Literal["light", "dark", "system"]
FontSize = Literal["small", "medium", "large"]
OutputTab = Literal["prompt", "queries", "json"]


# ---------------------------------------------------------------------------
# Wire-format helpers
# ---------------------------------------------------------------------------

def camel(name: str) -> str:
    """snake_case attribute name -> camelCase wire key."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_wire(value: Any) -> Any:
    """Recursively convert dataclass records into camelCase dicts."""
    if is_dataclass(value) and not isinstance(value, type):
        return {camel(f.name): to_wire(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    return value


def _str(value: Any, default: str = "") -> str:
    return value if isinstance(value, str) else default


def _bool(value: Any, default: bool = False) -> bool:
    return value if isinstance(value, bool) else default


def _int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def _str_list(value: Any, default: list[str] | None = None) -> list[str]:
    if not isinstance(value, list):
        return list(default or [])
    return [v for v in value if isinstance(v, str)]


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _records(value: Any, parse) -> list:
    """Parse each entry of a list with ``parse``, dropping rejects; non-lists give []."""
    if not isinstance(value, list):
        return []
    return [r for r in map(parse, value) if r is not None]


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass
class CategoryItem:
    """A guideline category shown in the output; order is definition order."""

    name: str
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: Any) -> CategoryItem | None:
        if isinstance(data, str):
            return cls(name=data, enabled=True)
        data = _mapping(data)
        if not isinstance(data.get("name"), str):
            return None
        return cls(name=data["name"], enabled=_bool(data.get("enabled"), True))


@dataclass
class KeywordChip:
    """A suggested optional search keyword that the user toggles on or off."""

    name: str
    enabled: bool = False

    @classmethod
    def from_dict(cls, data: Any) -> KeywordChip | None:
        if isinstance(data, str):
            return cls(name=data, enabled=False)
        data = _mapping(data)
        if not isinstance(data.get("name"), str):
            return None
        return cls(name=data["name"], enabled=_bool(data.get("enabled"), False))


@dataclass
class AppConfig:
    """The user-editable record that drives prompt generation."""

    date_today: str = ""
    query: str = ""
    scope: list[str] = field(default_factory=list)
    audiences: list[str] = field(default_factory=list)

    # Switches
    three_ministry_guidelines: bool = True
    official_domain_priority: bool = True
    site_operator: bool = True
    latest_version_priority: bool = True
    pdf_direct_link: bool = True
    include_search_log: bool = True
    e_gov_cross_reference: bool = True
    proof_mode: bool = False

    categories: list[CategoryItem] = field(default_factory=list)
    keyword_chips: list[KeywordChip] = field(default_factory=list)
    custom_keywords: list[str] = field(default_factory=list)
    exclude_keywords: list[str] = field(default_factory=list)
    priority_domains: list[str] = field(default_factory=list)

    active_tab: str = DEFAULT_PURPOSE_TAB

    def to_dict(self) -> dict[str, Any]:
        return to_wire(self)

    @classmethod
    def from_dict(cls, data: Any) -> AppConfig:
        data = _mapping(data)
        base = cls()
        return cls(
            date_today=_str(data.get("dateToday"), base.date_today),
            query=_str(data.get("query"), base.query),
            scope=_str_list(data.get("scope")),
            audiences=_str_list(data.get("audiences")),
            three_ministry_guidelines=_bool(
                data.get("threeMinistryGuidelines"), base.three_ministry_guidelines
            ),
            official_domain_priority=_bool(
                data.get("officialDomainPriority"), base.official_domain_priority
            ),
            site_operator=_bool(data.get("siteOperator"), base.site_operator),
            latest_version_priority=_bool(
                data.get("latestVersionPriority"), base.latest_version_priority
            ),
            pdf_direct_link=_bool(data.get("pdfDirectLink"), base.pdf_direct_link),
            include_search_log=_bool(data.get("includeSearchLog"), base.include_search_log),
            e_gov_cross_reference=_bool(
                data.get("eGovCrossReference"), base.e_gov_cross_reference
            ),
            proof_mode=_bool(data.get("proofMode"), base.proof_mode),
            categories=_records(data.get("categories"), CategoryItem.from_dict),
            keyword_chips=_records(data.get("keywordChips"), KeywordChip.from_dict),
            custom_keywords=_str_list(data.get("customKeywords")),
            exclude_keywords=_str_list(data.get("excludeKeywords")),
            priority_domains=_str_list(data.get("priorityDomains")),
            active_tab=_str(data.get("activeTab"), base.active_tab),
        )

    def merged(self, updates: dict[str, Any]) -> AppConfig:
        """Return a new config with camelCase ``updates`` applied."""
        return AppConfig.from_dict({**self.to_dict(), **_mapping(updates)})

    # --- toggles (each returns a new record) -------------------------------

    def toggle_scope(self, tag: str) -> AppConfig:
        return replace(self, scope=_toggled(self.scope, tag))

    def toggle_audience(self, tag: str) -> AppConfig:
        return replace(self, audiences=_toggled(self.audiences, tag))

    def toggle_category(self, index: int) -> AppConfig:
        if not 0 <= index < len(self.categories):
            return self
        categories = list(self.categories)
        item = categories[index]
        categories[index] = replace(item, enabled=not item.enabled)
        return replace(self, categories=categories)

    def toggle_keyword_chip(self, index: int) -> AppConfig:
        if not 0 <= index < len(self.keyword_chips):
            return self
        chips = list(self.keyword_chips)
        chip = chips[index]
        chips[index] = replace(chip, enabled=not chip.enabled)
        return replace(self, keyword_chips=chips)

    def set_custom_keywords(self, text: str) -> AppConfig:
        """Replace custom keywords from free text, one keyword per line."""
        return replace(self, custom_keywords=text.split("\n"))

    # --- derived views -----------------------------------------------------

    def enabled_categories(self) -> list[str]:
        return [c.name for c in self.categories if c.enabled]

    def enabled_keyword_chips(self) -> list[str]:
        return [k.name for k in self.keyword_chips if k.enabled]


def _toggled(items: list[str], tag: str) -> list[str]:
    if tag in items:
        return [i for i in items if i != tag]
    return [*items, tag]


# ---------------------------------------------------------------------------
# Extended settings
# ---------------------------------------------------------------------------

@dataclass
class OutputSection:
    """A named, orderable, toggle-able block of the Output Format section."""

    id: str
    name: str
    enabled: bool = True
    order: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> OutputSection | None:
        data = _mapping(data)
        if not isinstance(data.get("id"), str):
            return None
        return cls(
            id=data["id"],
            name=_str(data.get("name"), data["id"]),
            enabled=_bool(data.get("enabled"), True),
            order=_int(data.get("order"), 0),
        )


def default_output_sections() -> list[OutputSection]:
    return [
        OutputSection(id=sid, name=name, enabled=enabled, order=order)
        for sid, name, enabled, order in DEFAULT_OUTPUT_SECTIONS
    ]


@dataclass
class TemplateSettings:
    role_title: str = DEFAULT_ROLE_TITLE
    role_description: str = DEFAULT_ROLE_DESCRIPTION
    disclaimers: list[str] = field(default_factory=lambda: list(DISCLAIMER_LINES))
    output_sections: list[OutputSection] = field(default_factory=default_output_sections)
    custom_instructions: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> TemplateSettings:
        data = _mapping(data)
        base = cls()
        sections = data.get("outputSections")
        return cls(
            role_title=_str(data.get("roleTitle"), base.role_title),
            role_description=_str(data.get("roleDescription"), base.role_description),
            disclaimers=_str_list(data.get("disclaimers"), base.disclaimers),
            output_sections=(
                [s for s in map(OutputSection.from_dict, sections) if s]
                if isinstance(sections, list)
                else base.output_sections
            ),
            custom_instructions=_str(data.get("customInstructions"), base.custom_instructions),
        )

    def sorted_sections(self) -> list[OutputSection]:
        """Sections in ascending ``order``; ties keep list order."""
        return sorted(self.output_sections, key=lambda s: s.order)


@dataclass
class SearchSettings:
    use_site_operator: bool = True
    use_filetype_operator: bool = False
    filetypes: list[str] = field(default_factory=lambda: list(DEFAULT_FILETYPES))
    priority_rule: PriorityRule = "revised_date"
    excluded_domains: list[str] = field(default_factory=list)
    max_results: int = DEFAULT_MAX_RESULTS
    recursive_depth: int = DEFAULT_RECURSIVE_DEPTH

    @classmethod
    def from_dict(cls, data: Any) -> SearchSettings:
        data = _mapping(data)
        base = cls()
        return cls(
            use_site_operator=_bool(data.get("useSiteOperator"), base.use_site_operator),
            use_filetype_operator=_bool(
                data.get("useFiletypeOperator"), base.use_filetype_operator
            ),
            filetypes=_str_list(data.get("filetypes"), base.filetypes),
            priority_rule=_str(data.get("priorityRule"), base.priority_rule),  # type: ignore[arg-type]
            excluded_domains=_str_list(data.get("excludedDomains")),
            max_results=_int(data.get("maxResults"), base.max_results),
            recursive_depth=_int(data.get("recursiveDepth"), base.recursive_depth),
        )


@dataclass
class OutputSettings:
    language_mode: LanguageMode = "mixed"
    include_english_terms: bool = True
    detail_level: DetailLevel = "standard"
    e_gov_cross_reference: bool = True
    include_law_excerpts: bool = True
    output_format: OutputFormat = "markdown"
    include_search_log: bool = True

    @classmethod
    def from_dict(cls, data: Any) -> OutputSettings:
        data = _mapping(data)
        base = cls()
        return cls(
            language_mode=_str(data.get("languageMode"), base.language_mode),  # type: ignore[arg-type]
            include_english_terms=_bool(
                data.get("includeEnglishTerms"), base.include_english_terms
            ),
            detail_level=_str(data.get("detailLevel"), base.detail_level),  # type: ignore[arg-type]
            e_gov_cross_reference=_bool(
                data.get("eGovCrossReference"), base.e_gov_cross_reference
            ),
            include_law_excerpts=_bool(data.get("includeLawExcerpts"), base.include_law_excerpts),
            output_format=_str(data.get("outputFormat"), base.output_format),  # type: ignore[arg-type]
            include_search_log=_bool(data.get("includeSearchLog"), base.include_search_log),
        )


@dataclass
class UISettings:
    """Presentation preferences; carried along but never read by the engine."""

    theme: Theme = "system"
    font_size: FontSize = "medium"
    default_output_tab: OutputTab = "prompt"
    default_purpose_tab: str = DEFAULT_PURPOSE_TAB
    compact_mode: bool = False
    show_tooltips: bool = True
    animations_enabled: bool = True

    @classmethod
    def from_dict(cls, data: Any) -> UISettings:
        data = _mapping(data)
        base = cls()
        return cls(
            theme=_str(data.get("theme"), base.theme),  # type: ignore[arg-type]
            font_size=_str(data.get("fontSize"), base.font_size),  # type: ignore[arg-type]
            default_output_tab=_str(data.get("defaultOutputTab"), base.default_output_tab),  # type: ignore[arg-type]
            default_purpose_tab=_str(data.get("defaultPurposeTab"), base.default_purpose_tab),
            compact_mode=_bool(data.get("compactMode"), base.compact_mode),
            show_tooltips=_bool(data.get("showTooltips"), base.show_tooltips),
            animations_enabled=_bool(data.get("animationsEnabled"), base.animations_enabled),
        )


_SECTION_TYPES: dict[str, type] = {
    "template": TemplateSettings,
    "search": SearchSettings,
    "output": OutputSettings,
    "ui": UISettings,
}


@dataclass
class ExtendedSettings:
    """Separately persisted settings: template wording, search, output and UI."""

    template: TemplateSettings = field(default_factory=TemplateSettings)
    search: SearchSettings = field(default_factory=SearchSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    ui: UISettings = field(default_factory=UISettings)
    version: int = EXTENDED_SETTINGS_VERSION
    last_updated: str = ""

    def to_dict(self) -> dict[str, Any]:
        return to_wire(self)

    @classmethod
    def from_dict(cls, data: Any) -> ExtendedSettings:
        data = _mapping(data)
        return cls(
            template=TemplateSettings.from_dict(data.get("template")),
            search=SearchSettings.from_dict(data.get("search")),
            output=OutputSettings.from_dict(data.get("output")),
            ui=UISettings.from_dict(data.get("ui")),
            version=_int(data.get("version"), EXTENDED_SETTINGS_VERSION),
            last_updated=_str(data.get("lastUpdated")),
        )

    def merged(self, section: str, updates: dict[str, Any]) -> ExtendedSettings:
        """Return new settings with camelCase ``updates`` applied to one sub-record.

        Raises ``KeyError`` for an unknown section name.
        """
        record_type = _SECTION_TYPES[section]
        current = to_wire(getattr(self, section))
        record = record_type.from_dict({**current, **_mapping(updates)})
        return replace(self, **{section: record})


def update_template(settings: ExtendedSettings, updates: dict[str, Any]) -> ExtendedSettings:
    return settings.merged("template", updates)


def update_search(settings: ExtendedSettings, updates: dict[str, Any]) -> ExtendedSettings:
    return settings.merged("search", updates)


def update_output(settings: ExtendedSettings, updates: dict[str, Any]) -> ExtendedSettings:
    return settings.merged("output", updates)


def update_ui(settings: ExtendedSettings, updates: dict[str, Any]) -> ExtendedSettings:
    return settings.merged("ui", updates)


# ---------------------------------------------------------------------------
# Purpose presets
# ---------------------------------------------------------------------------

@dataclass
class TabPreset:
    """A purpose preset: the categories and keyword chips it switches in."""

    id: str
    name: str
    categories: list[str] = field(default_factory=list)
    keyword_chips: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return to_wire(self)

    @classmethod
    def from_dict(cls, data: Any) -> TabPreset | None:
        data = _mapping(data)
        if not _str(data.get("id")) or not _str(data.get("name")):
            return None
        return cls(
            id=data["id"],
            name=data["name"],
            categories=_str_list(data.get("categories")),
            keyword_chips=_str_list(data.get("keywordChips")),
        )
