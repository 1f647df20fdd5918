import pytest

from classifier import DEFAULT, RULES, Rule, classify, match_rule, signals_for, text_has
from radar_model import AI_EDU, AI_LATEST, CATEGORIES, EXAM, ICT, INFO1, MEXT


def test_device_rollout_headline_is_ict():
    c = classify("GIGAスクール 端末 更新 へ", "https://example.com/news/1", "—")
    assert c.tab == ICT
    assert "GIGA" in c.tags


def test_regulator_council_material():
    c = classify("中央教育審議会 配付資料", "https://www.mext.go.jp/b_menu/shingi/1.htm", "文部科学省")
    assert c.tab == MEXT
    assert c.tags == ["審議会", "会議資料"]


def test_regulator_fallback_tag():
    c = classify("お知らせ", "https://www.mext.go.jp/a.htm", "文部科学省")
    assert c == classify("お知らせ", "https://www.mext.go.jp/a.htm", "文部科学省")
    assert c.tab == MEXT
    assert c.tags == ["文科省"]


def test_regulator_wins_over_later_rules():
    c = classify("GIGAスクール構想 生成AI ガイドライン", "https://www.mext.go.jp/x.htm", "Google News: GIGA")
    assert c.tab == MEXT


def test_outlet_ai_section_with_education_context():
    c = classify(
        "学校で生成AIを活用 ガイドライン公開",
        "https://www.itmedia.co.jp/aiplus/articles/2610/16/news001.html",
        "ITmedia AI+",
    )
    assert c.tab == AI_EDU
    assert c.tags == ["ITmedia", "AI+", "生成AI(教育)", "活用事例", "ガイドライン"]


def test_outlet_ai_section_without_education_context():
    c = classify("新モデルを発表", "https://www.itmedia.co.jp/aiplus/articles/2610/16/news002.html", "ITmedia AI+")
    assert c.tab == AI_LATEST
    assert c.tags == ["ITmedia", "AI+", "生成AI(最新)", "新モデル"]


def test_outlet_enterprise_security():
    c = classify(
        "ランサムウェア被害で情報漏えい",
        "https://www.itmedia.co.jp/enterprise/articles/2610/16/news010.html",
        "ITmedia エンタープライズ",
    )
    assert c.tab == ICT
    assert c.tags == ["ITmedia", "エンタープライズ", "セキュリティ"]


def test_outlet_generic_fallback():
    c = classify("新製品レビュー", "https://www.itmedia.co.jp/pcuser/articles/1.html", "ITmedia PC USER")
    assert c.tab == ICT
    assert c.tags == ["ITmedia"]


def test_exam():
    c = classify("大学入学共通テスト 情報Ⅰの出題傾向", "https://example.com/exam/1", "—")
    assert c.tab == EXAM
    assert c.tags == ["共通テスト"]


def test_subject():
    c = classify("情報Ⅰ プログラミング授業の実践", "https://example.com/a/1", "—")
    assert c.tab == INFO1
    assert c.tags == ["プログラミング"]


def test_ai_in_education():
    c = classify("生成AIの校務活用 研修を実施", "https://example.com/a/2", "—")
    assert c.tab == AI_EDU
    assert c.tags == ["活用事例", "校務", "研修"]


def test_ai_latest():
    c = classify("ChatGPTに新機能 画像生成ツール", "https://example.com/a/3", "—")
    assert c.tab == AI_LATEST
    assert c.tags == ["新機能", "AIツール"]


def test_default_bucket():
    c = classify("今日の天気", "https://example.com/w", "—")
    assert c.tab == DEFAULT.tab == ICT
    assert c.tags == ["教育ニュース"]


@pytest.mark.parametrize("title,url,source", [
    ("", "", ""),
    (None, None, None),
    ("情報Ⅰ", "", ""),
    ("AI", "mailto:x@example.com", "ITmedia"),
])
def test_classify_is_total(title, url, source):
    c = classify(title, url, source)
    assert c.tab in CATEGORIES
    assert c.tags and all(c.tags)


def test_custom_rule_table():
    rules = (Rule("only", text_has("雑談"), INFO1, fallback="その他"),)
    assert classify("雑談です", "", "", rules=rules).tags == ["その他"]
    assert classify("無関係", "", "", rules=rules).tab == ICT


def test_match_rule_returns_first_hit():
    s = signals_for("共通テスト GIGA", "https://example.com/", "—")
    assert match_rule(s).name == "exam"
    assert [r.name for r in RULES][0] == "regulator"
