from datetime import datetime, timedelta, timezone

from payhost.products import Story
from payhost.text import (
    count_hashtags,
    escape_like,
    latest_mod_time,
    meta_hashtags,
    remove_hashtags,
    truncate,
    xml_path,
)


def test_count_hashtags():
    assert count_hashtags("Widget #go #tools") == 2
    assert count_hashtags("Widget") == 0


def test_remove_hashtags_leaves_no_tags():
    cleaned = remove_hashtags("Widget #go #tools")
    assert "#" not in cleaned
    assert count_hashtags(cleaned) == 0
    assert cleaned.strip() == "Widget"


def test_remove_hashtags_without_tags_is_identity():
    assert remove_hashtags("Plain name") == "Plain name"


def test_meta_hashtags():
    assert meta_hashtags(["#go", "#tools"]) == "go,tools,"
    assert meta_hashtags([]) == ""


def test_truncate_short_text_gets_ellipsis():
    assert truncate("abc", 10) == "abc..."


def test_truncate_long_text_fits_limit():
    result = truncate("x" * 200, 150)
    assert len(result) == 150
    assert result.endswith("...")
    assert result[:-3] == "x" * 147


def test_truncate_small_limit_keeps_text():
    assert truncate("abcdef", 3) == "abcdef..."


def test_truncate_counts_characters_after_bytes():
    text = "é" * 100
    assert truncate(text, 150) == text + "..."


def test_xml_path_values():
    assert xml_path("/products", "page=2") == "/products.xml?page=2"
    assert xml_path("/", "") == "/index.xml"


def test_xml_path_is_stable_for_feed_paths():
    assert xml_path("/products.xml", "q=a") == xml_path("/products", "q=a")


def test_latest_mod_time_empty_gives_now():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert latest_mod_time([], now) == now


def test_latest_mod_time_uses_first_story():
    first = datetime(2024, 1, 1, tzinfo=timezone.utc)
    stories = [Story(id=1, updated_at=first), Story(id=2, updated_at=first + timedelta(days=1))]
    assert latest_mod_time(stories) == first


def test_escape_like_round_trip():
    term = "50%_off_now"
    escaped = escape_like(term)
    assert escaped.replace("\\_", "_").replace("\\%", "%") == term
    assert escaped.count("\\") == term.count("_") + term.count("%")


def test_escape_like_plain_unchanged():
    assert escape_like("plain") == "plain"