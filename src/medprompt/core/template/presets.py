"""Built-in purpose presets and the factories for default records."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable

from medprompt.core.template.defaults import (
    DEFAULT_PRIORITY_DOMAINS,
    DEFAULT_PURPOSE_TAB,
)
from medprompt.core.template.models import (
    AppConfig,
    CategoryItem,
    ExtendedSettings,
    KeywordChip,
    TabPreset,
)

logger = logging.getLogger(__name__)


TAB_PRESETS: tuple[TabPreset, ...] = (
    TabPreset(
        id="medical-ai",
        name="医療AI",
        categories=[
            "法令・制度",
            "医療情報システム安全管理",
            "AI開発・利活用",
            "医療機器(SaMD)",
            "個人情報保護",
            "研究倫理",
        ],
        keyword_chips=[
            "医療情報システムの安全管理に関するガイドライン",
            "医療デジタルデータのAI研究開発等への利活用に係るガイドライン",
            "AI事業者ガイドライン",
            "プログラム医療機器",
            "次世代医療基盤法",
            "個人情報保護法 医療",
        ],
    ),
    TabPreset(
        id="generative-ai",
        name="生成AI",
        categories=[
            "生成AI利活用",
            "AIガバナンス",
            "個人情報保護",
            "著作権・知的財産",
            "医療情報システム安全管理",
        ],
        keyword_chips=[
            "AI事業者ガイドライン",
            "生成AI 医療 利活用",
            "テキスト生成AI 利活用 ガイドブック",
            "AIと著作権",
            "広島AIプロセス",
        ],
    ),
    TabPreset(
        id="samd",
        name="SaMD",
        categories=[
            "医療機器該当性",
            "承認審査・治験",
            "市販後対応",
            "サイバーセキュリティ",
            "品質マネジメント",
        ],
        keyword_chips=[
            "プログラムの医療機器該当性に関するガイドライン",
            "AI活用医療機器 審査",
            "医療機器のサイバーセキュリティ導入に関する手引書",
            "DASH for SaMD",
            "変更計画確認手続制度(IDATEN)",
        ],
    ),
    TabPreset(
        id="data-utilization",
        name="医療データ利活用",
        categories=[
            "次世代医療基盤法",
            "仮名加工・匿名加工",
            "二次利用",
            "研究倫理",
            "データ連携基盤",
        ],
        keyword_chips=[
            "次世代医療基盤法 ガイドライン",
            "仮名加工医療情報",
            "人を対象とする生命科学・医学系研究に関する倫理指針",
            "医療情報の二次利用",
            "全国医療情報プラットフォーム",
        ],
    ),
    TabPreset(
        id="security",
        name="医療情報セキュリティ",
        categories=[
            "安全管理措置",
            "クラウドサービス",
            "外部委託",
            "インシデント対応",
            "サイバー攻撃対策",
        ],
        keyword_chips=[
            "医療情報を取り扱う情報システム・サービスの提供事業者における安全管理ガイドライン",
            "医療機関におけるサイバーセキュリティ対策チェックリスト",
            "ランサムウェア 医療機関",
            "クラウドサービス 医療情報",
            "ISMAP",
        ],
    ),
)


def find_preset(
    preset_id: str, custom_presets: Iterable[TabPreset] = ()
) -> TabPreset | None:
    """Look up a preset by id; custom presets shadow built-in ones."""
    for preset in custom_presets:
        if preset.id == preset_id:
            return preset
    for preset in TAB_PRESETS:
        if preset.id == preset_id:
            return preset
    return None


def apply_preset(config: AppConfig, preset: TabPreset) -> AppConfig:
    """Switch the purpose tab: categories come in enabled, chips disabled."""
    return replace(
        config,
        active_tab=preset.id,
        categories=[CategoryItem(name=name, enabled=True) for name in preset.categories],
        keyword_chips=[KeywordChip(name=name, enabled=False) for name in preset.keyword_chips],
    )


def create_default_config(
    date_today: str | None = None,
    preset_id: str | None = None,
    custom_presets: Iterable[TabPreset] = (),
) -> AppConfig:
    """A fully populated configuration for a fresh session.

    ``date_today`` defaults to today's local date in ``YYYY-MM-DD`` form.
    An unknown ``preset_id`` falls back to the first built-in preset.
    """
    preset = find_preset(preset_id or DEFAULT_PURPOSE_TAB, custom_presets)
    if preset is None:
        logger.warning("Unknown preset %r, using %r", preset_id, TAB_PRESETS[0].id)
        preset = TAB_PRESETS[0]

    config = AppConfig(
        date_today=date_today or date.today().isoformat(),
        query="",
        scope=["医療AI"],
        audiences=["医療機関"],
        priority_domains=list(DEFAULT_PRIORITY_DOMAINS),
    )
    return apply_preset(config, preset)


def create_default_extended_settings() -> ExtendedSettings:
    return ExtendedSettings()
