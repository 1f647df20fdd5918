# scripts/classifier.py
#
# Tab + tag assignment as an ordered rule table. The first rule whose
# predicate matches decides the tab; its tag rules pick the tags, and its
# fallback tag keeps the tag list from ever being empty.
#
# Matching is plain case-insensitive substring search over
# "title url source"; no tokenizing, no stemming.

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Sequence, Tuple

from radar_model import ICT, INFO1, EXAM, AI_EDU, AI_LATEST, MEXT

@dataclass(frozen=True)
class Signals:
    text: str     # lowercased "title url source"
    url: str
    source: str   # as given; some outlet labels are matched case-sensitively
    source_lc: str

def signals_for(title: str, url: str, source: str) -> Signals:
    title, url, source = title or "", url or "", source or ""
    return Signals(
        text=f"{title} {url} {source}".lower(),
        url=url,
        source=source,
        source_lc=source.lower(),
    )

@dataclass(frozen=True)
class TagRule:
    tag: str
    keywords: Tuple[str, ...]

@dataclass(frozen=True)
class Rule:
    name: str
    when: Callable[[Signals], bool]
    tab: str
    tag_rules: Tuple[TagRule, ...] = ()
    base_tags: Tuple[str, ...] = ()
    fallback: str = ""

@dataclass(frozen=True)
class Classification:
    tab: str
    tags: List[str]

# ---------------- Predicates ----------------
def text_has(*keywords: str) -> Callable[[Signals], bool]:
    kws = tuple(k.lower() for k in keywords)
    return lambda s: any(k in s.text for k in kws)

def all_of(*preds: Callable[[Signals], bool]) -> Callable[[Signals], bool]:
    return lambda s: all(p(s) for p in preds)

def any_of(*preds: Callable[[Signals], bool]) -> Callable[[Signals], bool]:
    return lambda s: any(p(s) for p in preds)

def url_has(fragment: str) -> Callable[[Signals], bool]:
    return lambda s: fragment in s.url

def source_has(fragment: str) -> Callable[[Signals], bool]:
    return lambda s: fragment in s.source

def source_has_ci(fragment: str) -> Callable[[Signals], bool]:
    f = fragment.lower()
    return lambda s: f in s.source_lc

def T(tag: str, *keywords: str) -> TagRule:
    return TagRule(tag, tuple(k.lower() for k in keywords))

# ---------------- Keyword tables ----------------
EDU_SIGNALS = ("授業", "教育", "学校", "校務", "ガイドライン", "研修", "著作権", "個人情報")
AI_SIGNALS = ("生成ai", "chatgpt", "llm", "aiツール", "エージェント")

IS_MEXT = any_of(url_has("mext.go.jp"), source_has_ci("文部科学省"))
IS_ITMEDIA = any_of(url_has("itmedia.co.jp"), source_has_ci("itmedia"))
IS_AIPLUS = all_of(IS_ITMEDIA, any_of(url_has("/aiplus/"), source_has("AI+")))
IS_ENTERPRISE = all_of(IS_ITMEDIA, any_of(url_has("/enterprise/"), source_has("エンタープライズ")))
IS_ITMEDIA_NEWS = all_of(IS_ITMEDIA, any_of(url_has("/news/"), source_has("NEWS")))

AI_EDU_TAGS = (
    T("活用事例", "事例", "活用"),
    T("校務", "校務"),
    T("ガイドライン", "ガイドライン", "指針"),
    T("研修", "研修"),
    T("著作権", "著作権"),
    T("個人情報", "個人情報"),
)
AI_LATEST_TAGS = (
    T("新機能", "新機能", "アップデート"),
    T("新モデル", "新モデル", "llm", "モデル"),
    T("AIツール", "ツール", "サービス", "アプリ"),
    T("ワークフロー", "仕事術", "ワークフロー"),
)

RULES: Tuple[Rule, ...] = (
    Rule(
        "regulator", IS_MEXT, MEXT,
        tag_rules=(
            T("通知/事務連絡", "通知", "事務連絡"),
            T("審議会", "審議会"),
            T("会議資料", "会議", "資料"),
        ),
        fallback="文科省",
    ),
    Rule(
        "itmedia-aiplus-edu", all_of(IS_AIPLUS, text_has(*EDU_SIGNALS)), AI_EDU,
        base_tags=("ITmedia", "AI+", "生成AI(教育)"),
        tag_rules=tuple(r for r in AI_EDU_TAGS if r.tag != "研修"),
    ),
    Rule(
        "itmedia-aiplus", IS_AIPLUS, AI_LATEST,
        base_tags=("ITmedia", "AI+", "生成AI(最新)"),
        tag_rules=AI_LATEST_TAGS[:3],
    ),
    Rule(
        "itmedia-enterprise", IS_ENTERPRISE, ICT,
        base_tags=("ITmedia", "エンタープライズ"),
        tag_rules=(
            T("セキュリティ", "セキュリティ", "脆弱性", "不正アクセス", "情報漏えい", "ランサム", "フィッシング"),
            T("DX", "dx", "業務", "効率"),
            T("校務DX", "学校", "教育", "校務"),
        ),
    ),
    Rule(
        "itmedia-news", IS_ITMEDIA_NEWS, ICT,
        base_tags=("ITmedia", "NEWS"),
        tag_rules=(
            T("情報モラル", "sns", "誹謗中傷", "炎上", "プライバシー", "著作権", "個人情報"),
            T("法制度", "法", "規制", "ガイドライン"),
        ),
    ),
    Rule("itmedia", IS_ITMEDIA, ICT, base_tags=("ITmedia",)),
    Rule(
        "exam",
        any_of(text_has("共通テスト", "大学入学共通テスト"), all_of(text_has("情報ⅰ"), text_has("共通"))),
        EXAM,
        base_tags=("共通テスト",),
    ),
    Rule(
        "ict",
        any_of(text_has("ict", "giga", "校務dx", "教育ict"), source_has("ICT教育ニュース")),
        ICT,
        tag_rules=(
            T("GIGA", "giga", "一人一台", "端末"),
            T("校務DX", "校務dx", "校務", "統合型校務"),
            T("LMS・学習基盤", "lms", "classroom", "teams", "moodle"),
            T("端末・BYOD", "byod"),
            T("ネットワーク整備", "ネットワーク", "wifi", "回線"),
            T("教育委員会・自治体", "教育委員会", "自治体"),
        ),
        fallback="ICT教育",
    ),
    Rule(
        "subject", text_has("情報i", "情報ⅰ", "情報 ⅰ", "情報科", "高校 情報"), INFO1,
        tag_rules=(
            T("プログラミング", "プログラミング", "python", "scratch", "アルゴリズム"),
            T("データ活用", "データ活用", "統計", "分析", "可視化"),
            T("情報デザイン", "情報デザイン", "プレゼン", "メディア"),
            T("ネットワーク", "ネットワーク"),
            T("セキュリティ(授業)", "セキュリティ"),
            T("探究・PBL", "探究", "pbl"),
            T("評価", "評価", "ルーブリック"),
        ),
        fallback="情報Ⅰ",
    ),
    Rule(
        "ai-edu", all_of(text_has(*AI_SIGNALS), text_has(*EDU_SIGNALS)), AI_EDU,
        tag_rules=AI_EDU_TAGS,
        fallback="生成AI(教育)",
    ),
    Rule(
        "ai-latest", text_has(*AI_SIGNALS), AI_LATEST,
        tag_rules=AI_LATEST_TAGS,
        fallback="生成AI(最新)",
    ),
)

DEFAULT = Classification(ICT, ["教育ニュース"])

def _dedupe(tags: Sequence[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for t in tags:
        if t and t not in seen:
            seen.add(t)
            out.append(t)
    return out

def apply_rule(rule: Rule, s: Signals) -> Classification:
    tags = list(rule.base_tags)
    tags += [tr.tag for tr in rule.tag_rules if any(k in s.text for k in tr.keywords)]
    tags = _dedupe(tags)
    if not tags:
        tags = [rule.fallback or DEFAULT.tags[0]]
    return Classification(rule.tab, tags)

def match_rule(s: Signals, rules: Sequence[Rule] = RULES) -> Rule | None:
    for rule in rules:
        if rule.when(s):
            return rule
    return None

def classify(title: str, url: str, source: str, rules: Sequence[Rule] = RULES) -> Classification:
    s = signals_for(title, url, source)
    rule = match_rule(s, rules)
    if rule is None:
        return Classification(DEFAULT.tab, list(DEFAULT.tags))
    return apply_rule(rule, s)
