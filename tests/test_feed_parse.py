import pathlib

from feed_parse import parse_feed_items, parse_pub_date


def load_text(name: str) -> str:
    path = pathlib.Path(__file__).parent / "fixtures" / name
    return path.read_text(encoding="utf-8")


def test_parse_rss_items():
    items = parse_feed_items(load_text("sample_rss.xml"))
    assert len(items) == 2

    first = items[0]
    assert first.title == "GIGAスクール 端末 更新 へ"
    assert first.link == "https://ict-enews.net/2026/10/giga-update/?utm_source=rss&utm_medium=rss"
    assert first.published_raw == "Fri, 16 Oct 2026 10:00:00 +0900"
    assert "端末更新" in first.description


def test_entities_decoded_and_guid_used_when_link_missing():
    second = parse_feed_items(load_text("sample_rss.xml"))[1]
    assert second.title == "校務DX & クラウド化の手引き"
    assert second.link == "https://ict-enews.net/2026/10/komu-dx/"
    assert second.published_raw == "not a date"


def test_parse_invalid_input_yields_nothing():
    assert parse_feed_items("") == []
    assert parse_feed_items("not xml at all") == []
    assert parse_feed_items("<rss><channel><item><title>half") == []


def test_parse_pub_date():
    ok = parse_pub_date("Fri, 16 Oct 2026 10:00:00 +0900")
    assert ok.ok
    assert ok.value.utcoffset().total_seconds() == 9 * 3600
    assert parse_pub_date("2026-10-16T01:00:00Z").ok
    assert not parse_pub_date("not a date").ok
    assert not parse_pub_date("").ok
