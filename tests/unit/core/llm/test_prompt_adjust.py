"""Tests for per-model prompt adjustment and model-aware rendering."""

from __future__ import annotations

from conftest import make_test_model

from medprompt.core.llm.adjust import (
    SEARCH_TIPS_HEADER,
    adjust_prompt_for_model,
    render_for_model,
)
from medprompt.core.llm.models import PromptAdjustments
from medprompt.core.template.engine import generate_prompt, generate_search_queries
from medprompt.core.template.models import ExtendedSettings


def _model(**adjustments):
    return make_test_model(adjustments=PromptAdjustments(**adjustments))


class TestAdjustPromptForModel:
    def test_no_adjustments_returns_prompt_unchanged(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        assert adjust_prompt_for_model(prompt, make_test_model()) == prompt

    def test_remove_egov_api(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        adjusted = adjust_prompt_for_model(prompt, _model(remove_egov_api=True))
        assert "6. e-Gov法令取得" not in adjusted
        assert "laws.e-gov.go.jp/api" not in adjusted
        assert "# Task" in adjusted

    def test_remove_egov_sentinel_region(self):
        text = "前\nEGOV_SECTION_BEGIN\ne-Gov API を使う\nEGOV_SECTION_END\n後"
        adjusted = adjust_prompt_for_model(text, _model(remove_egov_api=True))
        assert adjusted == "前\n\n後"
        assert "e-Gov" not in adjusted

    def test_recursive_depth_replaced(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        adjusted = adjust_prompt_for_model(prompt, _model(recursive_depth=1))
        assert "（最大1階層まで）" in adjusted
        assert "（最大2階層まで）" not in adjusted

    def test_search_tips_only_without_browsing(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        browsing = make_test_model(
            has_web_browsing=True, adjustments=PromptAdjustments(add_search_tips=True)
        )
        assert adjust_prompt_for_model(prompt, browsing) == prompt

        offline = make_test_model(
            has_web_browsing=False, adjustments=PromptAdjustments(add_search_tips=True)
        )
        adjusted = adjust_prompt_for_model(prompt, offline)
        assert adjusted.startswith("# 事前準備（Web検索機能がない場合）")
        assert adjusted.endswith(prompt)

    def test_simplify_instructions(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        adjusted = adjust_prompt_for_model(prompt, _model(simplify_instructions=True))
        assert "## Phase 4: 法令参照（オプション）\n可能であれば、関連法令名を記載する。" in adjusted
        assert "法令ID特定不能" not in adjusted
        assert "# Output Format" in adjusted

    def test_not_idempotent_for_search_tips(self, config):
        offline = make_test_model(
            has_web_browsing=False, adjustments=PromptAdjustments(add_search_tips=True)
        )
        once = adjust_prompt_for_model("本文", offline)
        twice = adjust_prompt_for_model(once, offline)
        assert twice.count("# 事前準備") == 2
        assert SEARCH_TIPS_HEADER.strip() in once


class TestRenderForModel:
    def test_without_model(self, config):
        rendered = render_for_model(config, ExtendedSettings())
        assert rendered.prompt == generate_prompt(config, ExtendedSettings())
        assert rendered.model_id is None
        assert rendered.provider_id is None

    def test_catalogue_free_chatgpt(self, config, llm_registry):
        model = llm_registry.get_model("chatgpt")
        rendered = render_for_model(config, ExtendedSettings(), model)
        assert rendered.prompt.count("# 事前準備") == 1
        assert "6. e-Gov法令取得" not in rendered.prompt
        assert rendered.search_queries == generate_search_queries(config, ExtendedSettings())
        assert rendered.to_dict()["modelId"] == "gpt-4o-mini-free"
        assert rendered.to_dict()["providerId"] == "chatgpt"

    def test_catalogue_gemini_pro_keeps_egov(self, config, llm_registry):
        model = llm_registry.get_model("gemini", "gemini-pro")
        rendered = render_for_model(config, ExtendedSettings(), model)
        assert "6. e-Gov法令取得" in rendered.prompt
        assert "（最大3階層まで）" in rendered.prompt
