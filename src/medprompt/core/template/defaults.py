"""Built-in defaults for the guideline prompt template and its settings.

Plain constants only; the record factories that use them live in
``medprompt.core.template.presets``.
"""

from __future__ import annotations

# Bumped whenever the persisted ExtendedSettings layout changes.
EXTENDED_SETTINGS_VERSION = 2

# Date the built-in template wording was last reviewed against the guidelines.
TEMPLATE_BASE_DATE = "2026-01-15"

DEFAULT_ROLE_TITLE = "国内ガイドライン・ダイレクト・リトリーバー"

DEFAULT_ROLE_DESCRIPTION = """\
ユーザーが指定したテーマについて、国内の公式一次資料(省庁、独立行政法人、学会、業界団体が公開するガイドライン、通知、Q&A、手引き等)をWeb検索とブラウジングで直接取得し、その本文のみに基づいて最新版を特定・整理する。
一次資料で確認できない事項は推測で補わず、「不明」と明記する。"""

DISCLAIMER_LINES: tuple[str, ...] = (
    "本出力は情報整理支援であり、医療・法律・薬事に関する助言ではない",
    "個別ケースの判断は医師、弁護士、薬事専門家等の有資格者に相談すること",
    "ガイドラインは改定され得るため、必ず一次資料で最新版を確認すること",
)

# (id, display name, enabled, order)
DEFAULT_OUTPUT_SECTIONS: tuple[tuple[str, str, bool, int], ...] = (
    ("disclaimer", "免責", True, 1),
    ("search_conditions", "検索条件", True, 2),
    ("data_sources", "参照データソース", True, 3),
    ("guideline_list", "ガイドライン一覧", True, 4),
    ("three_ministry", "3省2ガイドラインの確定結果", True, 5),
    ("search_log", "検索ログ", True, 6),
    ("guardrail", "ガードレール", True, 7),
)

DEFAULT_FILETYPES: tuple[str, ...] = ("pdf",)
DEFAULT_MAX_RESULTS = 20
DEFAULT_RECURSIVE_DEPTH = 2

MAX_RESULTS_RANGE = (1, 100)
RECURSIVE_DEPTH_RANGE = (0, 10)

DEFAULT_PRIORITY_DOMAINS: tuple[str, ...] = (
    "mhlw.go.jp",
    "meti.go.jp",
    "soumu.go.jp",
    "pmda.go.jp",
    "ppc.go.jp",
    "digital.go.jp",
    "cao.go.jp",
    "amed.go.jp",
)

DEFAULT_SCOPE_OPTIONS: tuple[str, ...] = (
    "医療AI",
    "生成AI",
    "SaMD",
    "医療情報セキュリティ",
    "医療データ利活用",
    "研究倫理",
)

DEFAULT_AUDIENCE_OPTIONS: tuple[str, ...] = (
    "医療機関",
    "提供事業者",
    "開発企業",
    "研究者",
    "審査対応",
)

# Always searched, regardless of configuration.
MUST_KEYWORD = "3省2ガイドライン"

# Theme used in search queries when the user has not entered one.
FALLBACK_THEME = "医療AI"

DEFAULT_PURPOSE_TAB = "medical-ai"
