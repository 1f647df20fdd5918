from radar_config import (
    DEFAULT_FEEDS, DEFAULT_PAGES, DEFAULT_QUERIES, WEIGHTS_PATH,
    FeedSource, PageSource, QuerySource, W, load_sources, load_weights,
)


def test_load_weights_json5(tmp_path):
    path = tmp_path / "weights.json5"
    path.write_text("""{
  // comments and trailing commas are fine
  source: {ict_enews: 25,},
  tab: {ICT: 9},
}""", encoding="utf-8")
    data, dbg = load_weights(str(path))
    assert dbg["weights_loaded"] is True
    assert dbg["weights_keys"] == ["source", "tab"]
    assert W(data, "source.ict_enews", 20) == 25
    assert W(data, "tab.EXAM", 1) == 1


def test_load_weights_missing_or_invalid(tmp_path):
    data, dbg = load_weights(str(tmp_path / "nope.json5"))
    assert data == {} and dbg["weights_error"] == "missing"

    bad = tmp_path / "bad.json5"
    bad.write_text("[1, 2, 3]", encoding="utf-8")
    data, dbg = load_weights(str(bad))
    assert data == {}
    assert not dbg["weights_loaded"]
    assert "top level" in dbg["weights_error"]

    broken = tmp_path / "broken.json5"
    broken.write_text("{source: ", encoding="utf-8")
    assert load_weights(str(broken))[0] == {}


def test_bundled_weights_file_loads():
    data, dbg = load_weights(WEIGHTS_PATH)
    assert dbg["weights_loaded"], dbg
    assert W(data, "tab.ICT", None) == 8


def test_dotted_lookup():
    d = {"a": {"b": {"c": 1}}, "x": 3}
    assert W(d, "a.b.c", 0) == 1
    assert W(d, "a.z", "dflt") == "dflt"
    assert W(d, "x.y", None) is None


def test_built_in_sources():
    feeds, queries, pages = load_sources(None)
    assert feeds == DEFAULT_FEEDS and len(feeds) == 4
    assert queries == DEFAULT_QUERIES and len(queries) == 27
    assert pages == DEFAULT_PAGES and len(pages) == 3


def test_sources_override(tmp_path):
    path = tmp_path / "sources.json5"
    path.write_text("""{
  feeds: [{url: "https://example.com/rss", source: "Example"}, {source: "no url"}],
  queries: ["情報I 教材", {q: "校務DX", tab: "ICT"}, ""],
}""", encoding="utf-8")
    feeds, queries, pages = load_sources(str(path))
    assert feeds == [FeedSource("https://example.com/rss", "Example")]
    assert queries == [QuerySource("情報I 教材"), QuerySource("校務DX", "ICT")]
    assert pages == DEFAULT_PAGES
    assert pages[0] == PageSource("https://www.mext.go.jp/a_menu/whatsnew/index.htm")


def test_unreadable_sources_fall_back(tmp_path, capsys):
    path = tmp_path / "sources.json5"
    path.write_text("{feeds: [", encoding="utf-8")
    feeds, queries, pages = load_sources(str(path))
    assert (feeds, queries, pages) == (DEFAULT_FEEDS, DEFAULT_QUERIES, DEFAULT_PAGES)
    assert "[warn] sources file unreadable" in capsys.readouterr().err
