"""Per-model prompt adjustment.

Rewrites an assembled prompt for a model's declared capability gaps. The
rewrite is not idempotent (the search-tips header is prepended every time),
so ``render_for_model`` is the one place that applies it, once per render.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from medprompt.core.llm.models import LLMModel
from medprompt.core.template.engine import generate_prompt, generate_search_queries
from medprompt.core.template.models import AppConfig, ExtendedSettings

logger = logging.getLogger(__name__)

_EGOV_REGION_RE = re.compile(r"EGOV_SECTION_BEGIN[\s\S]*?EGOV_SECTION_END")
_EGOV_RULE_RE = re.compile(r"6\. e-Gov法令取得[\s\S]*?(?=\n\n#|\n\n##|$)")
_DEPTH_NOTE_RE = re.compile(r"（最大\d+階層まで）")
_PHASE4_RE = re.compile(r"## Phase 4: 法令クロスリファレンス[\s\S]*?(?=\n\n#)")

SEARCH_TIPS_HEADER = """
# 事前準備（Web検索機能がない場合）
このLLMにはWeb検索機能がないため、以下の手順で使用してください：
1. 別途ブラウザで検索を行い、関連するガイドラインのPDFをダウンロード
2. PDFをこのチャットにアップロード
3. 本プロンプトの指示に従って分析を依頼

"""

SIMPLIFIED_PHASE4 = "## Phase 4: 法令参照（オプション）\n可能であれば、関連法令名を記載する。\n\n"


def adjust_prompt_for_model(prompt: str, model: LLMModel) -> str:
    """Apply ``model.prompt_adjustments`` to ``prompt``; unchanged when it has none."""
    adjustments = model.prompt_adjustments
    if adjustments is None:
        return prompt

    adjusted = prompt

    if adjustments.remove_egov_api:
        adjusted = _EGOV_REGION_RE.sub("", adjusted)
        adjusted = _EGOV_RULE_RE.sub("", adjusted, count=1)

    if adjustments.recursive_depth is not None:
        note = f"（最大{adjustments.recursive_depth}階層まで）"
        adjusted = _DEPTH_NOTE_RE.sub(lambda _m: note, adjusted)

    if adjustments.add_search_tips and not model.has_web_browsing:
        adjusted = SEARCH_TIPS_HEADER + adjusted

    if adjustments.simplify_instructions:
        adjusted = _PHASE4_RE.sub(lambda _m: SIMPLIFIED_PHASE4, adjusted, count=1)

    return adjusted.strip()


@dataclass
class RenderedPrompt:
    prompt: str
    search_queries: list[str] = field(default_factory=list)
    model_id: str | None = None
    provider_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "searchQueries": list(self.search_queries),
            "modelId": self.model_id,
            "providerId": self.provider_id,
        }


def render_for_model(
    config: AppConfig,
    settings: ExtendedSettings | None = None,
    model: LLMModel | None = None,
) -> RenderedPrompt:
    """Assemble the prompt and queries, adjusting the prompt once for ``model``."""
    prompt = generate_prompt(config, settings)
    if model is not None:
        prompt = adjust_prompt_for_model(prompt, model)
        logger.debug("Adjusted prompt for %s/%s", model.provider, model.id)

    return RenderedPrompt(
        prompt=prompt,
        search_queries=generate_search_queries(config, settings),
        model_id=model.id if model else None,
        provider_id=model.provider if model else None,
    )
