"""Tests for AppConfig/ExtendedSettings records, presets and defaults."""

from __future__ import annotations

import pytest

from conftest import TEST_DATE

from medprompt.core.template.defaults import DEFAULT_PRIORITY_DOMAINS
from medprompt.core.template.models import (
    AppConfig,
    ExtendedSettings,
    OutputSection,
    TabPreset,
    update_search,
    update_ui,
)
from medprompt.core.template.presets import (
    TAB_PRESETS,
    apply_preset,
    create_default_config,
    find_preset,
)


class TestDefaultConfig:
    def test_default_values(self):
        config = create_default_config(date_today=TEST_DATE)
        assert config.date_today == TEST_DATE
        assert config.query == ""
        assert config.scope == ["医療AI"]
        assert config.audiences == ["医療機関"]
        assert config.priority_domains == list(DEFAULT_PRIORITY_DOMAINS)
        assert config.active_tab == "medical-ai"
        assert config.proof_mode is False
        assert config.e_gov_cross_reference is True

    def test_categories_enabled_chips_disabled(self):
        config = create_default_config(date_today=TEST_DATE)
        assert config.categories and all(c.enabled for c in config.categories)
        assert config.keyword_chips and not any(k.enabled for k in config.keyword_chips)

    def test_date_defaults_to_today(self):
        config = create_default_config()
        assert len(config.date_today) == 10
        assert config.date_today[4] == "-"

    def test_unknown_preset_falls_back_to_first(self):
        config = create_default_config(date_today=TEST_DATE, preset_id="nope")
        assert config.active_tab == TAB_PRESETS[0].id

    def test_custom_preset_used(self):
        custom = TabPreset(id="custom-1", name="Mine", categories=["X"], keyword_chips=["Y"])
        config = create_default_config(
            date_today=TEST_DATE, preset_id="custom-1", custom_presets=[custom]
        )
        assert config.active_tab == "custom-1"
        assert config.enabled_categories() == ["X"]


class TestPresets:
    def test_builtin_ids(self):
        assert [p.id for p in TAB_PRESETS] == [
            "medical-ai",
            "generative-ai",
            "samd",
            "data-utilization",
            "security",
        ]

    def test_custom_shadows_builtin(self):
        custom = TabPreset(id="samd", name="Custom SaMD")
        assert find_preset("samd", [custom]).name == "Custom SaMD"
        assert find_preset("samd").name == "SaMD"
        assert find_preset("missing") is None

    def test_apply_preset_replaces_lists(self, config):
        config = config.toggle_keyword_chip(0)
        switched = apply_preset(config, find_preset("security"))
        assert switched.active_tab == "security"
        assert switched.enabled_categories()[0] == "安全管理措置"
        assert switched.enabled_keyword_chips() == []
        # Everything else carries over.
        assert switched.scope == config.scope
        assert switched.date_today == config.date_today


class TestToggles:
    def test_toggle_scope_adds_and_removes(self, config):
        added = config.toggle_scope("SaMD")
        assert added.scope == ["医療AI", "SaMD"]
        assert added.toggle_scope("SaMD").scope == ["医療AI"]
        assert config.scope == ["医療AI"]

    def test_toggle_audience(self, config):
        assert config.toggle_audience("医療機関").audiences == []

    def test_toggle_category_out_of_range_returns_same(self, config):
        assert config.toggle_category(99) is config
        assert config.toggle_keyword_chip(-1) is config

    def test_toggle_chip(self, config):
        toggled = config.toggle_keyword_chip(1)
        assert toggled.enabled_keyword_chips() == [config.keyword_chips[1].name]
        assert not config.keyword_chips[1].enabled

    def test_set_custom_keywords_splits_lines(self, config):
        updated = config.set_custom_keywords("A\nB\n\nC")
        assert updated.custom_keywords == ["A", "B", "", "C"]


class TestWireFormat:
    def test_to_dict_uses_camel_case(self, config):
        data = config.to_dict()
        assert data["dateToday"] == TEST_DATE
        assert data["eGovCrossReference"] is True
        assert data["keywordChips"][0] == {"name": config.keyword_chips[0].name, "enabled": False}
        assert "date_today" not in data

    def test_from_dict_round_trip(self, config):
        assert AppConfig.from_dict(config.to_dict()) == config

    def test_from_dict_is_lenient(self):
        config = AppConfig.from_dict(
            {"query": 5, "proofMode": "yes", "scope": ["a", 1], "categories": ["法令", {"x": 1}]}
        )
        assert config.query == ""
        assert config.proof_mode is False
        assert config.scope == ["a"]
        assert [c.name for c in config.categories] == ["法令"]

    @pytest.mark.parametrize("value", [5, True, {"name": "AI"}, "AI", None])
    def test_non_list_records_become_empty(self, value):
        config = AppConfig.from_dict({"categories": value, "keywordChips": value})
        assert config.categories == []
        assert config.keyword_chips == []

    def test_merged_with_mistyped_list_keeps_other_fields(self, config):
        merged = config.merged({"keywordChips": True, "query": "遠隔医療"})
        assert merged.keyword_chips == []
        assert merged.query == "遠隔医療"
        assert merged.categories == config.categories

    def test_merged_applies_updates(self, config):
        merged = config.merged({"query": "遠隔医療", "proofMode": True})
        assert merged.query == "遠隔医療"
        assert merged.proof_mode is True
        assert merged.categories == config.categories


class TestExtendedSettings:
    def test_defaults(self):
        settings = ExtendedSettings()
        assert settings.version == 2
        assert settings.search.max_results == 20
        assert settings.search.recursive_depth == 2
        assert settings.search.priority_rule == "revised_date"
        assert settings.output.language_mode == "mixed"
        assert [s.id for s in settings.template.sorted_sections()] == [
            "disclaimer",
            "search_conditions",
            "data_sources",
            "guideline_list",
            "three_ministry",
            "search_log",
            "guardrail",
        ]

    def test_update_section(self):
        settings = update_search(ExtendedSettings(), {"maxResults": 30})
        assert settings.search.max_results == 30
        assert settings.search.use_site_operator is True
        assert update_ui(settings, {"theme": "dark"}).ui.theme == "dark"

    def test_unknown_section_raises(self):
        with pytest.raises(KeyError):
            ExtendedSettings().merged("nope", {})

    def test_sorted_sections_stable_on_ties(self):
        settings = ExtendedSettings()
        settings.template.output_sections = [
            OutputSection(id="b", name="b", order=1),
            OutputSection(id="a", name="a", order=1),
            OutputSection(id="c", name="c", order=0),
        ]
        assert [s.id for s in settings.template.sorted_sections()] == ["c", "b", "a"]

    def test_round_trip(self):
        settings = update_search(ExtendedSettings(), {"excludedDomains": ["x.com"]})
        assert ExtendedSettings.from_dict(settings.to_dict()) == settings

    def test_integer_float_accepted(self):
        settings = ExtendedSettings.from_dict({"search": {"maxResults": 30.0}})
        assert settings.search.max_results == 30
