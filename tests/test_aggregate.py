import json
import os
from datetime import datetime, timedelta

from aggregate import aggregate, atomic_write_json, build_artifact, merge_items, to_item
from radar_model import ICT, JST, Item, ProvisionalRecord, iso_jst
from url_canon import item_id

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=JST)


def rec(title, url, source="—", age_days=0.5):
    return ProvisionalRecord(title, url, source, iso_jst(NOW - timedelta(days=age_days)))


def test_to_item_canonicalizes_and_classifies():
    it = to_item(rec("  GIGAスクール 端末 更新 へ ", "https://Example.com/a/?utm_source=x", source=""), NOW)
    assert it.url == "https://example.com/a"
    assert it.id == item_id("https://example.com/a")
    assert it.title == "GIGAスクール 端末 更新 へ"
    assert it.source == "—"
    assert it.tab == ICT
    assert "GIGA" in it.tags
    assert it.score > 0


def test_to_item_drops_untitled_records():
    assert to_item(rec("   ", "https://example.com/a"), NOW) is None
    assert to_item(rec("title", ""), NOW) is None


def test_duplicates_merge_into_one_item():
    items = aggregate([
        rec("GIGA 端末", "https://example.com/x?utm_source=rss", age_days=1),
        rec("GIGA 端末 と 校務DX の話", "https://example.com/x/", age_days=3),
    ], now=NOW)
    assert len(items) == 1
    it = items[0]
    assert it.title == "GIGA 端末 と 校務DX の話"
    assert it.published_at == iso_jst(NOW - timedelta(days=3))
    assert it.tags == ["GIGA", "校務DX"]


def test_merge_items_rules():
    a = Item("sha1:1", "短い", "https://e.com/1", "A", "2026-10-17T00:00:00+09:00", ICT, ["x", "y"], 5)
    b = Item("sha1:1", "長いタイトル", "https://e.com/1", "B", "2026-10-16T00:00:00+09:00", "MEXT", ["y", "z"], 9)
    m = merge_items(a, b)
    assert m.title == "長いタイトル"
    assert m.published_at == "2026-10-16T00:00:00+09:00"
    assert m.tags == ["x", "y", "z"]
    assert m.score == 9
    assert (m.source, m.tab) == ("A", ICT)
    # equal length keeps the first title
    assert merge_items(b, Item("sha1:1", "同じ長さの題", "", "", "", "", [], 0)).title == "長いタイトル"


def test_retention_window():
    items = aggregate([
        rec("six days old", "https://example.com/6", age_days=6),
        rec("eight days old", "https://example.com/8", age_days=8),
        ProvisionalRecord("undated", "https://example.com/u", "—", "sometime"),
    ], retention_days=7, now=NOW)
    assert [it.title for it in items] == ["six days old"]


def test_sorted_by_score_then_recency():
    items = aggregate([
        rec("plain older", "https://example.com/1", age_days=2),
        rec("plain newer", "https://example.com/2", age_days=1.5),
        rec("授業で使える教材", "https://example.com/3", source="ICT教育ニュース", age_days=5),
    ], now=NOW)
    assert [it.title for it in items] == ["授業で使える教材", "plain newer", "plain older"]
    pairs = [(it.score, it.published_at) for it in items]
    assert pairs == sorted(pairs, reverse=True)


def test_cap():
    records = [rec(f"記事 {i}", f"https://example.com/{i}") for i in range(801)]
    assert len(aggregate(records, now=NOW, cap=800)) == 800
    assert len(aggregate(records[:10], now=NOW, cap=3)) == 3


def test_cap_keeps_the_top_ranked():
    records = [
        rec(
            f"記事 {i}" + (" 授業" if i % 3 == 0 else ""),
            f"https://example.com/{i}",
            source="ICT教育ニュース" if i % 5 == 0 else "—",
            age_days=i * 0.008,
        )
        for i in range(801)
    ]
    ranked = sorted(
        (to_item(r, NOW) for r in records),
        key=lambda it: (it.score, it.published_at),
        reverse=True,
    )
    assert len({it.score for it in ranked}) > 3

    kept = aggregate(records, now=NOW, cap=800)
    assert [it.id for it in kept] == [it.id for it in ranked[:800]]
    assert ranked[-1].id not in {it.id for it in kept}
    assert ranked[-1].score == min(it.score for it in ranked)


def test_artifact_written_atomically(tmp_path):
    items = aggregate([rec("GIGA 端末", "https://example.com/x")], now=NOW)
    out = build_artifact(items, generated_at=NOW, debug={"kept": 1})
    assert out["generatedAt"] == "2026-10-18T12:00:00+09:00"
    assert out["count"] == 1
    assert out["items"][0]["publishedAt"] == items[0].published_at

    path = tmp_path / "data" / "items.json"
    atomic_write_json(str(path), out)
    text = path.read_text(encoding="utf-8")
    assert text.endswith("\n")
    assert "GIGA 端末" in text
    assert json.loads(text) == out
    assert os.listdir(path.parent) == ["items.json"]


def test_build_artifact_without_debug():
    assert "_debug" not in build_artifact([], generated_at=NOW)
