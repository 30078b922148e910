"""Prompt renderer: builds the guideline prompt as an ordered list of blocks.

Blocks carry ``[[TOKEN]]`` placeholders that the engine fills in afterwards.
The e-Gov law-retrieval rule and the two proof-mode blocks belong to named
regions; the engine keeps or drops a region as a whole, so no marker text ever
reaches the assembled prompt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from medprompt.core.template.defaults import MAX_RESULTS_RANGE, RECURSIVE_DEPTH_RANGE
from medprompt.core.template.models import ExtendedSettings, OutputSettings, SearchSettings

logger = logging.getLogger(__name__)

# Sentinels that delimit the e-Gov and proof regions in flat prompt text.
# Only the model adjustment works on flat text; the renderer never emits them.
EGOV_SECTION_BEGIN = "EGOV_SECTION_BEGIN"
EGOV_SECTION_END = "EGOV_SECTION_END"
PROOF_SECTION_BEGIN = "PROOF_SECTION_BEGIN"
PROOF_SECTION_END = "PROOF_SECTION_END"

REGION_EGOV = "egov"
REGION_PROOF = "proof"


@dataclass(frozen=True)
class PromptBlock:
    """One top-level block of the prompt; ``region`` names its gate, if any."""

    name: str
    text: str
    region: str | None = None


def clamp(value: int, bounds: tuple[int, int]) -> int:
    low, high = bounds
    return max(low, min(high, value))


def format_list(items: list[str], prefix: str = "・") -> str:
    if not items:
        return f"{prefix}(なし)"
    return "\n".join(f"{prefix}{item}" for item in items)


# ---------------------------------------------------------------------------
# Fixed blocks
# ---------------------------------------------------------------------------

_MODEL_DEFINITION = """\
# Model Definition

## Variables
$Date_today$: システムの現在日付(YYYY-MM-DD)
$Query$: ユーザーの探索テーマ
$Scope$: 対象範囲(例: 医療AI、生成AI、SaMD、医療情報セキュリティ、医療データ利活用、研究倫理)
$Must_keywords$: 必須検索語
$Optional_keywords$: 追加検索語
$Candidate_docs$: 候補文書リスト
$Doc_title$: 文書タイトル
$Issuer$: 発行主体(省庁、機関、学会、業界団体など)
$Published_date$: 公開日
$Revised_date$: 改定日
$Version$: 版数
$Doc_url$: 公式URL(HTMLまたはPDFの直リンク)
$Doc_type$: 文書種別(ガイドライン、通知、事務連絡、Q&A、手引き、報告書、告示、法令など)
$Fetched_text$: $Doc_url$ から取得した本文テキスト

$Law_name$: 法令名
$Law_ID$: e-Gov法令ID
$U_xml$: e-Gov API URL
$U_web$: e-Gov Web URL
$Law_xml$: $U_xml$ から取得したXML"""

_PROOF_BEGIN = """\
# 実証
以下、実用に耐えうるか実証せよ。プロンプトの指示に従い一次資料を取得し、最後に実証結果として達成事項と制約事項を述べよ。"""

_PROOF_RESULT = """\
# 実証結果
最後に、本プロンプトが実用に耐えうるかを自己点検し、達成事項と制約事項を簡潔に述べよ。"""

_INPUT = """\
# Input
Date_today: [[DATE_TODAY]]
Query: [[QUERY]]
Scope: [[SCOPE]]

Audiences:
[[AUDIENCES_LIST]]

PriorityDomains:
[[PRIORITY_DOMAINS_LIST]]

Must_keywords:
[[MUST_KEYWORDS_LIST]]

Optional_keywords:
[[OPTIONAL_KEYWORDS_LIST]]

Exclude_keywords:
[[EXCLUDE_KEYWORDS_LIST]]

Instruction:
次の条件で検索と整理を実行せよ。
- 必須検索語: Must_keywords
- 追加検索語: Optional_keywords
- 除外キーワード: Exclude_keywords
- 対象者: Audiences
- 優先ドメイン: PriorityDomains
- 可能な限り公式一次資料(PDF含む)へ到達し、最新版を確定すること"""


# ---------------------------------------------------------------------------
# Settings-dependent blocks
# ---------------------------------------------------------------------------

def _priority_rule_phrase(rule: str) -> str:
    if rule == "revised_date":
        return "改定日が最も新しい最新版"
    if rule == "published_date":
        return "公開日が最も新しい版"
    return "関連度が最も高い版"


def _language_mode_phrase(mode: str) -> str:
    if mode == "japanese_only":
        return "日本語を基本とする"
    if mode == "english_priority":
        return "英語を優先し、必要に応じて日本語も併用する"
    return "日本語を基本とし、必要に応じて英語(SaMD等)も併用する"


def build_rules(search: SearchSettings) -> str:
    parts = [
        "## Rules (Strict Logic)\n"
        "1. ゼロ知識\n"
        "   ・一次資料を取得する前に、内容を断定しない\n"
        "   ・一次資料に書かれていないことは「不明」とする\n"
        "   ・推測で補完しない\n"
        "\n"
        "2. 公式優先\n"
        "   ・候補発見のために一般サイトを使ってよいが、内容の根拠は必ず公式一次資料に限る\n"
        "   ・公式一次資料に到達できない場合は「公式資料未確認」と明記し、要約はしない\n"
        "   ・優先ドメイン:\n"
        "[[PRIORITY_DOMAINS_LIST]]"
    ]

    if search.excluded_domains:
        excluded = "\n".join(f"     - {d}" for d in search.excluded_domains)
        parts.append(f"\n   ・除外ドメイン:\n{excluded}")

    depth = clamp(search.recursive_depth, RECURSIVE_DEPTH_RANGE)
    depth_note = f"（最大{depth}階層まで）" if depth > 0 else ""

    parts.append(
        "\n\n"
        "3. 版管理\n"
        f"   ・同名文書が複数版ある場合、{_priority_rule_phrase(search.priority_rule)}を特定して採用する\n"
        "   ・旧版も見つかった場合は「旧版」として別枠で併記する\n"
        "\n"
        "4. 出力リンク形式\n"
        "   ・出力するURLは必ず Markdown の [表示ラベル](URL) 形式で提示する\n"
        "   ・生のURL文字列をそのまま表示しない\n"
        "\n"
        "5. 再帰的参照\n"
        "   ・一次資料内に別の指針、通知、Q&A、別添、関連ガイドライン、用語集、チェックリストが"
        f"参照されている場合、リンクを辿って同様に取得し、一覧に追加する{depth_note}\n"
        "   ・重複は統合し、最新版を優先する"
    )
    return "".join(parts)


def build_egov_rule(output: OutputSettings) -> str:
    excerpt = "\n   ・該当条文の短い抜粋を含める" if output.include_law_excerpts else ""
    return (
        "6. e-Gov法令取得\n"
        "   ・文書内に法令(法律、政令、省令、告示など)が参照されている場合、"
        "可能ならe-Govで法令IDを特定し、下記の正規フォーマットでAPIに直接アクセスしてXMLから条文を取得する\n"
        f"   ・検索エンジンURL、短縮URL、リダイレクトURLを生成しない{excerpt}\n"
        "\n"
        "   API用(固定フォーマット):\n"
        "   https://laws.e-gov.go.jp/api/2/law_data/{$Law_ID}?applicable_date={$Date_today}\n"
        "\n"
        "   Web用(固定フォーマット):\n"
        "   https://laws.e-gov.go.jp/law/{$Law_ID}"
    )


def build_task(search: SearchSettings, output: OutputSettings) -> str:
    if search.use_site_operator:
        site_step = "優先ドメインに対して site: 指定も併用する(例: site:mhlw.go.jp 医療AI ガイドライン)"
    else:
        site_step = "優先ドメインを参考に検索する"

    if search.use_filetype_operator and search.filetypes:
        filetype_step = f"filetype:{'/'.join(search.filetypes)} 指定を併用する"
    else:
        filetype_step = "検索結果は必ず公開日・改定日を確認し、最新版らしいものを優先して開く"

    max_results = clamp(search.max_results, MAX_RESULTS_RANGE)

    return f"""\
# Task

## Phase 1: 探索計画の確定
1. ユーザー入力から $Query と $Scope を整理する(目的、対象者、用途、期間)
2. $Must_keywords を確定する。必ず次を含める
   ・3省2ガイドライン
3. $Optional_keywords を生成する。検索語は{_language_mode_phrase(output.language_mode)}
   追加検索語候補:
[[OPTIONAL_KEYWORDS_LIST]]
4. {site_step}
5. {filetype_step}

## Phase 2: 候補文書の収集と一次資料取得
1. 検索で見つかった候補を $Candidate_docs に記録する（最大{max_results}件）
   ・タイトル、発行主体、版数、公開日、改定日、対象者、URL、文書種別、形式(PDF/HTML)
2. 各候補について $Doc_url を開き、本文 $Fetched_text を取得する
3. PDFの場合は本文を読み取り、医療AIに関係する箇所(AI、機械学習、生成AI、SaMD、医療機器、医療情報、匿名加工、仮名加工、委託、クラウド、越境移転、セキュリティ等)を特定する

## Phase 3: 必須テーマの確定
1. 「3省2ガイドライン」を構成する文書を、公式一次資料に基づいて確定する
   ・正式名称
   ・最新版の版数と改定日
   ・対象(医療機関向け、提供事業者向け等)
   ・公式URL(ページとPDF)
2. 医療AIに関する他の国内ガイドラインも、同様に最新版と根拠URLを確定する

## Phase 4: 法令クロスリファレンス(必要時)
1. 各文書で参照されている主要な法令名を抽出する
2. e-Govで法令IDを特定できる場合、固定フォーマットのAPI URLを生成してXMLを取得する
3. 医療AIに関係する条文参照がある場合のみ、該当条文を短く引用し、どの要求事項と紐付くか整理する
4. 法令IDを特定できない場合は「法令ID特定不能」と明記する"""


# ---------------------------------------------------------------------------
# Output format
# ---------------------------------------------------------------------------

_GUIDELINE_FIELDS = {
    "concise": (
        "・タイトル\n"
        "・発行主体\n"
        "・最新版の版数と改定日\n"
        "・公式URL"
    ),
    "standard": (
        "・タイトル\n"
        "・発行主体\n"
        "・文書種別\n"
        "・最新版の版数と改定日\n"
        "・対象者と適用範囲\n"
        "・医療AIとの関係(本文の根拠となる短い抜粋と要約)\n"
        "・関連法令(e-Govリンク、可能なら該当条文の短い抜粋)"
    ),
    "detailed": (
        "・タイトル\n"
        "・発行主体\n"
        "・文書種別\n"
        "・最新版の版数と改定日\n"
        "・対象者と適用範囲\n"
        "・医療AIとの関係(本文の根拠となる詳細な抜粋と要約)\n"
        "・関連法令(e-Govリンク、該当条文の抜粋)\n"
        "・関連する他のガイドライン\n"
        "・実務上の重要ポイント"
    ),
}

_SECTION_TEMPLATES = {
    "disclaimer": (
        "■ 免責\n"
        "・本出力は情報整理支援です。個別ケースについては有資格者など専門家にご相談下さい。\n"
        "・本出力は[[DATE_TODAY]]時点の取得結果であり、更新があり得るため一次資料で確認すること。"
    ),
    "search_conditions": (
        "■ 検索条件\n"
        "・日付: [[DATE_TODAY]]\n"
        "・テーマ: [[QUERY]]\n"
        "・範囲: [[SCOPE]]\n"
        "・優先: 公式一次資料、最新版"
    ),
    "data_sources": (
        "■ 参照データソース\n"
        "・各文書について [公式ページ](URL) と [PDF](URL) を列挙(存在する方のみ)\n"
        "・法令は [XMLデータ(API)](U_xml) と [公式閲覧(e-Gov)](U_web)"
    ),
    "three_ministry": (
        "■ 3省2ガイドラインの確定結果\n"
        "・構成文書の対応関係\n"
        "・対象者の違い\n"
        "・実務上の重要ポイント"
    ),
    "search_log": (
        "■ 検索ログ\n"
        "・実際に使った検索語\n"
        "・参照した公式ドメイン一覧\n"
        "・除外した候補と理由(例: 公式一次資料に到達できない)"
    ),
    "guardrail": (
        "# Guardrail\n"
        "・一次資料を開けない、本文を取得できない場合は、その旨を明記して推測しない\n"
        "・最新版か不明な場合は、候補の改定日を比較し「最新版候補」として扱う\n"
        "・出力リンクは必ず [表示ラベル](URL) 形式に統一する\n"
        "・e-Govは上記の固定フォーマットのみを使い、検索エンジン経由のURL生成をしない"
    ),
}


def _guideline_list(output: OutputSettings) -> str:
    # Unknown detail levels read as "standard".
    field_list = _GUIDELINE_FIELDS.get(output.detail_level, _GUIDELINE_FIELDS["standard"])
    return (
        "■ ガイドライン一覧\n"
        "カテゴリ別に、各文書を次の項目で整理する\n"
        f"{field_list}\n"
        "\n"
        "カテゴリ例\n"
        "[[CATEGORIES_LIST]]"
    )


def render_output_section(section_id: str, output: OutputSettings) -> str | None:
    """Sub-template for one output section id; ``None`` when nothing is emitted."""
    if section_id == "guideline_list":
        return _guideline_list(output)
    if section_id == "search_log" and not output.include_search_log:
        return None
    return _SECTION_TEMPLATES.get(section_id)


def build_output_format(settings: ExtendedSettings) -> str:
    parts = ["# Output Format"]
    for section in settings.template.sorted_sections():
        if not section.enabled:
            continue
        text = render_output_section(section.id, settings.output)
        if text is None:
            logger.debug("Output section %s emits nothing", section.id)
            continue
        parts.append(text)
    return "\n\n".join(parts)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def build_blocks(settings: ExtendedSettings) -> list[PromptBlock]:
    """All prompt blocks in their fixed order, before region gating."""
    template = settings.template

    blocks = [
        PromptBlock(
            "role",
            f"# Role\nあなたは、内部知識を一切持たない「{template.role_title}」です。\n"
            f"{template.role_description.strip()}",
        ),
        PromptBlock("disclaimers", "# 注意\n" + "\n".join(f"- {d}" for d in template.disclaimers)),
        PromptBlock("proof_begin", _PROOF_BEGIN, region=REGION_PROOF),
        PromptBlock("model_definition", _MODEL_DEFINITION),
        PromptBlock("rules", build_rules(settings.search)),
        PromptBlock("egov", build_egov_rule(settings.output), region=REGION_EGOV),
        PromptBlock("task", build_task(settings.search, settings.output)),
        PromptBlock("output_format", build_output_format(settings)),
        PromptBlock("input", _INPUT),
    ]
    if template.custom_instructions.strip():
        blocks.append(PromptBlock("custom", f"# カスタム指示\n{template.custom_instructions}"))
    blocks.append(PromptBlock("proof_result", _PROOF_RESULT, region=REGION_PROOF))
    return blocks

