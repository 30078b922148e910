"""Tests for prompt assembly: block order, region gating, token substitution."""

from __future__ import annotations

import re

from conftest import TEST_DATE, categories, chips, make_empty_config, make_test_config, make_test_settings

from medprompt.core.template.engine import (
    build_token_values,
    generate_prompt,
    substitute_tokens,
)
from medprompt.core.template.models import ExtendedSettings, OutputSection


class TestPromptStructure:
    def test_blocks_appear_in_fixed_order(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        headings = ["# Role", "# 注意", "# Model Definition", "## Rules", "6. e-Gov法令取得",
                    "# Task", "# Output Format", "# Input"]
        positions = [prompt.index(h) for h in headings]
        assert positions == sorted(positions)

    def test_role_uses_template_title(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        assert prompt.startswith("# Role\nあなたは、内部知識を一切持たない「国内ガイドライン・ダイレクト・リトリーバー」です。")

    def test_custom_role_title(self, config):
        settings = make_test_settings(template={"roleTitle": "テスト係"})
        assert "「テスト係」" in generate_prompt(config, settings)

    def test_no_triple_newlines_and_stripped(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        assert "\n\n\n" not in prompt
        assert prompt == prompt.strip()

    def test_no_known_tokens_or_sentinels_left(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        for token in build_token_values(config):
            assert f"[[{token}]]" not in prompt
        assert "SECTION_BEGIN" not in prompt
        assert "SECTION_END" not in prompt

    def test_default_settings_used_when_omitted(self, config):
        assert generate_prompt(config) == generate_prompt(config, ExtendedSettings())


class TestRegions:
    def test_egov_rule_follows_extended_settings(self):
        config = make_test_config(e_gov_cross_reference=False)
        prompt = generate_prompt(config, ExtendedSettings())
        assert "6. e-Gov法令取得" in prompt

    def test_egov_rule_removed_when_setting_off(self, config):
        settings = make_test_settings(output={"eGovCrossReference": False})
        prompt = generate_prompt(config, settings)
        assert "6. e-Gov法令取得" not in prompt
        assert "https://laws.e-gov.go.jp/" not in prompt
        assert "# Task" in prompt

    def test_proof_blocks_absent_by_default(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        assert "# 実証" not in prompt

    def test_proof_blocks_wrap_prompt_when_enabled(self):
        config = make_test_config(proof_mode=True)
        prompt = generate_prompt(config, ExtendedSettings())
        assert prompt.index("# 実証\n") < prompt.index("# Model Definition")
        assert prompt.rstrip().endswith(
            "最後に、本プロンプトが実用に耐えうるかを自己点検し、達成事項と制約事項を簡潔に述べよ。"
        )

    def test_proof_mode_in_settings_does_not_matter(self):
        config = make_test_config(proof_mode=False)
        prompt = generate_prompt(config, make_test_settings(output={"eGovCrossReference": True}))
        assert "# 実証結果" not in prompt


class TestInputBlock:
    def test_values_are_filled(self):
        config = make_test_config(query="遠隔医療", scope=["医療AI", "SaMD"], audiences=["医療機関"])
        prompt = generate_prompt(config, ExtendedSettings())
        assert f"Date_today: {TEST_DATE}" in prompt
        assert "Query: 遠隔医療" in prompt
        assert "Scope: 医療AI、SaMD" in prompt
        assert "Audiences:\n・医療機関" in prompt
        assert "Must_keywords:\n・3省2ガイドライン" in prompt

    def test_empty_fields_use_placeholders(self):
        prompt = generate_prompt(make_empty_config(), ExtendedSettings())
        assert "Query: (未入力)" in prompt
        assert "Scope: (未指定)" in prompt
        assert "Audiences:\n・(なし)" in prompt
        assert "Optional_keywords:\n・(なし)" in prompt
        assert "Exclude_keywords:\n・(なし)" in prompt

    def test_optional_keywords_are_enabled_chips_then_custom(self):
        config = make_empty_config(
            keyword_chips=[*chips("A"), *chips("B", enabled=False), *chips("C")],
            custom_keywords=["X", "  ", "Y"],
        )
        prompt = generate_prompt(config, ExtendedSettings())
        assert "Optional_keywords:\n・A\n・C\n・X\n・Y\n" in prompt

    def test_blank_exclude_keywords_dropped(self):
        config = make_empty_config(exclude_keywords=["", "広告", " "])
        assert "Exclude_keywords:\n・広告\n" in generate_prompt(config, ExtendedSettings())


class TestSettingsDependentText:
    def test_priority_rule_wording(self, config):
        for rule, phrase in [
            ("revised_date", "改定日が最も新しい最新版"),
            ("published_date", "公開日が最も新しい版"),
            ("relevance", "関連度が最も高い版"),
        ]:
            prompt = generate_prompt(config, make_test_settings(search={"priorityRule": rule}))
            assert phrase in prompt

    def test_depth_note(self, config):
        assert "（最大2階層まで）" in generate_prompt(config, ExtendedSettings())
        zero = generate_prompt(config, make_test_settings(search={"recursiveDepth": 0}))
        assert "階層まで" not in zero

    def test_depth_is_clamped(self, config):
        prompt = generate_prompt(config, make_test_settings(search={"recursiveDepth": 50}))
        assert "（最大10階層まで）" in prompt

    def test_max_results_clamped_in_task(self, config):
        assert "（最大20件）" in generate_prompt(config, ExtendedSettings())
        prompt = generate_prompt(config, make_test_settings(search={"maxResults": 500}))
        assert "（最大100件）" in prompt
        prompt = generate_prompt(config, make_test_settings(search={"maxResults": 0}))
        assert "（最大1件）" in prompt

    def test_excluded_domains_listed(self, config):
        settings = make_test_settings(search={"excludedDomains": ["example.com", "spam.jp"]})
        prompt = generate_prompt(config, settings)
        assert "・除外ドメイン:\n     - example.com\n     - spam.jp" in prompt

    def test_filetype_step(self, config):
        settings = make_test_settings(
            search={"useFiletypeOperator": True, "filetypes": ["pdf", "docx"]}
        )
        assert "5. filetype:pdf/docx 指定を併用する" in generate_prompt(config, settings)

    def test_site_step_off(self, config):
        settings = make_test_settings(search={"useSiteOperator": False})
        assert "4. 優先ドメインを参考に検索する" in generate_prompt(config, settings)

    def test_language_mode_phrase(self, config):
        settings = make_test_settings(output={"languageMode": "japanese_only"})
        assert "検索語は日本語を基本とする" in generate_prompt(config, settings)

    def test_law_excerpt_line(self, config):
        assert "該当条文の短い抜粋を含める" in generate_prompt(config, ExtendedSettings())
        settings = make_test_settings(output={"includeLawExcerpts": False})
        assert "該当条文の短い抜粋を含める" not in generate_prompt(config, settings)


class TestOutputFormat:
    def test_sections_in_order(self, config):
        prompt = generate_prompt(config, ExtendedSettings())
        markers = ["■ 免責", "■ 検索条件", "■ 参照データソース", "■ ガイドライン一覧",
                   "■ 3省2ガイドラインの確定結果", "■ 検索ログ", "# Guardrail"]
        positions = [prompt.index(m) for m in markers]
        assert positions == sorted(positions)

    def test_reordered_and_disabled_sections(self, config):
        settings = make_test_settings(
            template={
                "outputSections": [
                    {"id": "guardrail", "name": "G", "enabled": True, "order": 1},
                    {"id": "disclaimer", "name": "D", "enabled": True, "order": 2},
                    {"id": "data_sources", "name": "S", "enabled": False, "order": 3},
                ]
            }
        )
        prompt = generate_prompt(config, settings)
        assert prompt.index("# Guardrail") < prompt.index("■ 免責")
        assert "■ 参照データソース" not in prompt
        assert "■ 検索条件" not in prompt

    def test_search_log_needs_output_setting(self, config):
        settings = make_test_settings(output={"includeSearchLog": False})
        assert "■ 検索ログ" not in generate_prompt(config, settings)

    def test_unknown_section_id_ignored(self, config):
        settings = ExtendedSettings()
        settings.template.output_sections.append(OutputSection(id="mystery", name="?", order=0))
        assert generate_prompt(config, settings) == generate_prompt(config, ExtendedSettings())

    def test_detail_levels(self, config):
        concise = generate_prompt(config, make_test_settings(output={"detailLevel": "concise"}))
        detailed = generate_prompt(config, make_test_settings(output={"detailLevel": "detailed"}))
        assert "・文書種別" not in concise.split("■ ガイドライン一覧")[1].split("カテゴリ例")[0]
        assert "・実務上の重要ポイント\n\nカテゴリ例" in detailed

    def test_categories_list_uses_enabled_only(self):
        config = make_empty_config(
            categories=[*categories("法令"), *categories("倫理", enabled=False)]
        )
        prompt = generate_prompt(config, ExtendedSettings())
        assert "カテゴリ例\n・法令" in prompt
        assert "・倫理" not in prompt


class TestCustomInstructions:
    def test_blank_instructions_add_nothing(self, config):
        settings = make_test_settings(template={"customInstructions": "   \n "})
        assert "# カスタム指示" not in generate_prompt(config, settings)

    def test_instructions_placed_after_input(self, config):
        settings = make_test_settings(template={"customInstructions": "表形式で出力せよ"})
        prompt = generate_prompt(config, settings)
        assert prompt.index("# Input") < prompt.index("# カスタム指示\n表形式で出力せよ")

    def test_known_tokens_in_instructions_are_expanded(self, config):
        settings = make_test_settings(template={"customInstructions": "日付 [[DATE_TODAY]] [[NOPE]]"})
        prompt = generate_prompt(config, settings)
        assert f"日付 {TEST_DATE} [[NOPE]]" in prompt


class TestSubstituteTokens:
    def test_single_pass(self):
        text = substitute_tokens("[[A]] [[B]]", {"A": "[[B]]", "B": "b"})
        assert text == "[[B]] b"

    def test_unknown_tokens_untouched(self):
        assert substitute_tokens("[[X]] [[lower]]", {}) == "[[X]] [[lower]]"

    def test_all_template_tokens_have_values(self, config):
        prompt = generate_prompt(config, make_test_settings(output={"includeSearchLog": True}))
        assert re.search(r"\[\[[A-Z_]+\]\]", prompt) is None
