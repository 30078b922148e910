"""Template engine: turns a configuration into the guideline prompt and search queries."""

from __future__ import annotations

import logging
import re

from medprompt.core.template.defaults import FALLBACK_THEME, MAX_RESULTS_RANGE, MUST_KEYWORD
from medprompt.core.template.models import AppConfig, ExtendedSettings
from medprompt.core.template.presets import create_default_extended_settings
from medprompt.core.template.renderer import (
    REGION_EGOV,
    REGION_PROOF,
    PromptBlock,
    build_blocks,
    clamp,
    format_list,
)

logger = logging.getLogger(__name__)

MAX_SEARCH_QUERIES = 10
MAX_CHIP_QUERIES = 5
MAX_SITE_QUERIES = 3

_TOKEN_RE = re.compile(r"\[\[([A-Z_]+)\]\]")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def _region_enabled(block: PromptBlock, config: AppConfig, settings: ExtendedSettings) -> bool:
    # The e-Gov rule follows the extended settings; proof mode follows the config.
    if block.region == REGION_EGOV:
        return settings.output.e_gov_cross_reference
    if block.region == REGION_PROOF:
        return config.proof_mode
    return True


def build_token_values(config: AppConfig) -> dict[str, str]:
    """Values for every ``[[TOKEN]]`` the template uses."""
    optional_keywords = [
        *config.enabled_keyword_chips(),
        *(k for k in config.custom_keywords if k.strip()),
    ]
    return {
        "DATE_TODAY": config.date_today,
        "QUERY": config.query or "(未入力)",
        "SCOPE": "、".join(config.scope) or "(未指定)",
        "AUDIENCES_LIST": format_list(config.audiences),
        "PRIORITY_DOMAINS_LIST": format_list(config.priority_domains),
        "MUST_KEYWORDS_LIST": format_list([MUST_KEYWORD]),
        "OPTIONAL_KEYWORDS_LIST": format_list(optional_keywords),
        "EXCLUDE_KEYWORDS_LIST": format_list([k for k in config.exclude_keywords if k.strip()]),
        "CATEGORIES_LIST": format_list(config.enabled_categories()),
    }


def substitute_tokens(text: str, values: dict[str, str]) -> str:
    """Replace known ``[[TOKEN]]``s in one pass; substituted text is not rescanned."""

    def _replace(match: re.Match[str]) -> str:
        return values.get(match.group(1), match.group(0))

    return _TOKEN_RE.sub(_replace, text)


def generate_prompt(config: AppConfig, settings: ExtendedSettings | None = None) -> str:
    """Assemble the full guideline-retrieval prompt for ``config``."""
    settings = settings or create_default_extended_settings()

    blocks = [b for b in build_blocks(settings) if _region_enabled(b, config, settings)]
    logger.debug(
        "Assembling prompt from %d blocks: %s",
        len(blocks),
        ", ".join(b.name for b in blocks),
    )

    prompt = "\n\n".join(b.text for b in blocks)
    prompt = substitute_tokens(prompt, build_token_values(config))
    prompt = _BLANK_RUN_RE.sub("\n\n", prompt)
    return prompt.strip()


def generate_search_queries(
    config: AppConfig, settings: ExtendedSettings | None = None
) -> list[str]:
    """Ready-to-paste search queries, most important first."""
    settings = settings or create_default_extended_settings()
    search = settings.search
    theme = config.query or FALLBACK_THEME

    queries = [f"{MUST_KEYWORD} {theme} ガイドライン 最新版"]

    if config.query:
        queries.append(f"{config.query} ガイドライン 国内")

    queries.extend(config.enabled_keyword_chips()[:MAX_CHIP_QUERIES])

    if config.official_domain_priority and search.use_site_operator:
        for domain in config.priority_domains[:MAX_SITE_QUERIES]:
            queries.append(f"site:{domain} {theme} ガイドライン")

    if search.use_filetype_operator and search.filetypes:
        filetype_filter = " OR ".join(f"filetype:{ft}" for ft in search.filetypes)
        queries.append(f"{theme} ガイドライン ({filetype_filter})")

    limit = min(MAX_SEARCH_QUERIES, clamp(search.max_results, MAX_RESULTS_RANGE))
    return queries[:limit]
