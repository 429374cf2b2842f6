# File: tests/test_link_extractor.py
import pytest

from gitbook2text.crawler.link_extractor import (
    extract_links,
    has_non_content_extension,
    is_under_prefix,
    normalize_url,
)

BASE = "https://docs.example.com/guide"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("https://Docs.Example.com/guide/", "https://docs.example.com/guide"),
        ("HTTPS://docs.example.com", "https://docs.example.com"),
        ("https://docs.example.com/", "https://docs.example.com"),
        ("https://docs.example.com/a/b#part", "https://docs.example.com/a/b"),
        ("https://docs.example.com/a?x=1", "https://docs.example.com/a"),
        ("https://docs.example.com/a/../b/./c/", "https://docs.example.com/b/c"),
    ],
)
def test_normalize_url(raw, expected):
    assert normalize_url(raw) == expected


def test_trailing_slash_and_fragment_are_same_page():
    assert normalize_url("https://x.io/p/") == normalize_url("https://x.io/p#top")


def test_extract_resolves_relative_and_absolute(mock_page_data):
    links = extract_links(mock_page_data.content, mock_page_data.url)
    assert links == ["http://example.com/link1"]


def test_extract_excludes_self_link():
    markup = (
        f'<a href="{BASE}">self</a>'
        '<a href="/guide/">self with slash</a>'
        '<a href="#section">anchor</a>'
        '<a href="/guide#install">self with fragment</a>'
        '<a href="/setup">Setup</a>'
    )
    assert extract_links(markup, BASE) == ["https://docs.example.com/setup"]


def test_extract_filters_foreign_hosts_and_schemes():
    markup = (
        '<a href="https://other.com/page">other</a>'
        '<a href="mailto:team@example.com">mail</a>'
        '<a href="javascript:void(0)">js</a>'
        '<a href="tel:+123">tel</a>'
        '<a href="ftp://docs.example.com/file">ftp</a>'
        '<a href="https://sub.docs.example.com/x">subdomain</a>'
        '<a href="/ok">ok</a>'
    )
    assert extract_links(markup, BASE) == ["https://docs.example.com/ok"]


def test_extract_filters_non_content_extensions():
    markup = (
        '<a href="/img/logo.png">logo</a>'
        '<a href="/files/manual.PDF">pdf</a>'
        '<a href="/dist/tool.zip">zip</a>'
        '<a href="/api/reference">api</a>'
    )
    assert extract_links(markup, BASE) == ["https://docs.example.com/api/reference"]


def test_extract_keeps_first_occurrence_order_without_duplicates():
    markup = (
        '<a href="/c">C</a><a href="/a">A</a><a href="/c/">C again</a>'
        '<a href="/b#x">B</a><a href="/a?ref=nav">A again</a>'
    )
    assert extract_links(markup, BASE) == [
        "https://docs.example.com/c",
        "https://docs.example.com/a",
        "https://docs.example.com/b",
    ]


def test_extract_respects_allowed_prefix():
    markup = '<a href="/guide/install">in</a><a href="/guides">sibling</a><a href="/blog">out</a>'
    links = extract_links(markup, "https://docs.example.com/guide/intro", allowed_prefix=BASE)
    assert links == ["https://docs.example.com/guide/install"]


def test_extract_ignores_anchor_without_href():
    assert extract_links("<a name='x'>no href</a><p>text</p>", BASE) == []


def test_helpers():
    assert has_non_content_extension("https://x.io/a/b.jpeg?size=2")
    assert not has_non_content_extension("https://x.io/a/b")
    assert is_under_prefix("https://x.io/docs/a", "https://x.io/docs")
    assert not is_under_prefix("https://x.io/docsets", "https://x.io/docs")
