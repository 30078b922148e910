"""Lite mode policy: usage restrictions for the learning/exploration edition.

Lite mode exists to keep generated material from being mistaken for medical
advice. When enabled:
- every prompt handed out is watermarked at top and bottom
- only the prompt and the basic search queries may be copied
- detailed references and regulatory mappings are hidden
- a non-dismissible disclaimer accompanies every output
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Severity = Literal["critical", "warning", "info"]
DisclaimerFrequency = Literal["every-page", "once-per-session", "on-output"]
WatermarkPosition = Literal["fixed-top", "fixed-bottom", "inline"]

SECTION_PROMPT = "prompt"
SECTION_BASIC_QUERIES = "basic-queries"
SECTION_DETAILED_REFERENCES = "detailed-references"
SECTION_REGULATORY_MAPPINGS = "regulatory-mappings"


@dataclass(frozen=True)
class WatermarkConfig:
    text: str
    color: str
    position: WatermarkPosition
    font_size: str
    z_index: int


@dataclass(frozen=True)
class DisclaimerConfig:
    frequency: DisclaimerFrequency
    dismissible: bool
    text: str
    severity: Severity


@dataclass(frozen=True)
class OutputRestrictionsConfig:
    hide_detailed_references: bool
    hide_regulatory_mappings: bool
    copyable_sections: tuple[str, ...]
    # None means unlimited.
    max_copies_per_session: int | None = None


@dataclass(frozen=True)
class LiteModeConfig:
    watermark: WatermarkConfig
    disclaimer: DisclaimerConfig
    output_restrictions: OutputRestrictionsConfig


LITE_MODE_CONFIG = LiteModeConfig(
    watermark=WatermarkConfig(
        text="学習・探索用途のみ | 医療判断には使用禁止",
        color="rgba(239, 68, 68, 0.15)",
        position="fixed-top",
        font_size="0.75rem",
        z_index=9999,
    ),
    disclaimer=DisclaimerConfig(
        frequency="every-page",
        dismissible=False,
        text=(
            "⚠️ 本ツールは学習・探索支援のみを目的としています。\n"
            "医療判断・診断・治療・法的助言には使用できません。\n"
            "個別のケースについては医師、弁護士、薬事専門家等の\n"
            "有資格者にご相談ください。"
        ),
        severity="critical",
    ),
    output_restrictions=OutputRestrictionsConfig(
        hide_detailed_references=True,
        hide_regulatory_mappings=True,
        copyable_sections=(SECTION_PROMPT, SECTION_BASIC_QUERIES),
        max_copies_per_session=None,
    ),
)


@dataclass
class CopyTracker:
    """Per-session copy counts by section."""

    max_copies: int | None = None
    _counts: dict[str, int] = field(default_factory=dict)

    def track(self, section: str) -> bool:
        """Record a copy; False once the section has used up its allowance."""
        current = self._counts.get(section, 0)
        if self.max_copies is not None and current >= self.max_copies:
            return False
        self._counts[section] = current + 1
        return True

    def reset(self) -> None:
        self._counts.clear()

    def get_count(self, section: str) -> int:
        return self._counts.get(section, 0)


def new_copy_tracker(config: LiteModeConfig = LITE_MODE_CONFIG) -> CopyTracker:
    return CopyTracker(max_copies=config.output_restrictions.max_copies_per_session)


def can_copy(
    section: str, tracker: CopyTracker, config: LiteModeConfig = LITE_MODE_CONFIG
) -> bool:
    """Whether ``section`` may be copied now; a permitted copy is counted."""
    if section not in config.output_restrictions.copyable_sections:
        return False
    return tracker.track(section)


def add_watermark(content: str, config: LiteModeConfig = LITE_MODE_CONFIG) -> str:
    text = config.watermark.text
    return f"{text}\n\n{content}\n\n{text}"


def should_hide_section(section_type: str, config: LiteModeConfig = LITE_MODE_CONFIG) -> bool:
    restrictions = config.output_restrictions
    if section_type == SECTION_DETAILED_REFERENCES:
        return restrictions.hide_detailed_references
    if section_type == SECTION_REGULATORY_MAPPINGS:
        return restrictions.hide_regulatory_mappings
    return False


def lite_notice(config: LiteModeConfig = LITE_MODE_CONFIG) -> dict[str, Any]:
    """Disclaimer and restriction summary attached to lite-mode tool output."""
    restrictions = config.output_restrictions
    return {
        "disclaimer": config.disclaimer.text,
        "severity": config.disclaimer.severity,
        "dismissible": config.disclaimer.dismissible,
        "copyableSections": list(restrictions.copyable_sections),
        "hiddenSections": [
            s
            for s in (SECTION_DETAILED_REFERENCES, SECTION_REGULATORY_MAPPINGS)
            if should_hide_section(s, config)
        ],
    }
