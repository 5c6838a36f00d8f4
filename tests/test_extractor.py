from __future__ import annotations

import pytest

from linkqueue.ingestion.extractor import LinkExtractor, find_links, flatten, url_host
from linkqueue.ingestion.tree import parse_html, walk


def test_only_anchors_with_targets_become_links() -> None:
    markup = """
    <div>
      <a href="http://one.com/a">one</a>
      <a href="">empty</a>
      <a name="anchor">missing</a>
      <p><a href="https://two.org/b?x=1">two</a></p>
      <a href="/relative/path">three</a>
    </div>
    """

    links = find_links(markup)

    assert [link.url for link in links] == [
        "http://one.com/a",
        "https://two.org/b?x=1",
        "/relative/path",
    ]
    assert all(link.queued is False and link.queued_at is None for link in links)


def test_domain_is_host_of_url() -> None:
    links = find_links(
        '<a href="https://news.example.org/story">a</a>'
        '<a href="http://user@host.com:8080/x">b</a>'
        '<a href="/local">c</a>'
    )

    assert [link.domain for link in links] == ["news.example.org", "host.com:8080", ""]


@pytest.mark.parametrize(
    "bad_href",
    ["http://[::1/broken", "http://example.com:port/", "http://example.com/%zz"],
)
def test_unparseable_href_is_skipped_without_affecting_siblings(bad_href: str) -> None:
    markup = (
        '<a href="http://before.com/">before</a>'
        f'<a href="{bad_href}">bad</a>'
        '<a href="http://after.com/">after</a>'
    )

    links = find_links(markup)

    assert [link.domain for link in links] == ["before.com", "after.com"]


def test_context_concatenates_text_nodes_with_one_space_each() -> None:
    links = find_links('<p><a href="http://other.com/y">Hello <b>bold</b> world</a> outside</p>')

    assert len(links) == 1
    assert links[0].context == "Hello  bold  world "


def test_context_keeps_whitespace_untrimmed() -> None:
    links = find_links('<a href="http://a.com/">  spaced\n text </a>')

    assert links[0].context == "  spaced\n text  "


def test_flatten_covers_whole_subtree() -> None:
    root = parse_html("<div>a<span>b<i>c</i></span>d</div>")

    assert flatten(root) == "a b c d "


def test_links_keep_first_occurrence_order_including_nested_markup() -> None:
    links = find_links(
        '<ul><li><a href="http://z.com/"><span>z</span></a></li>'
        '<li><a href="http://a.com/">a</a></li>'
        '<li><a href="http://z.com/">z again</a></li></ul>'
    )

    assert [link.url for link in links] == ["http://z.com/", "http://a.com/", "http://z.com/"]
    assert links[0].context == "z "


def test_extractor_can_be_walked_directly() -> None:
    extractor = LinkExtractor()

    walk(parse_html('<a HREF="http://caps.com/">caps</a>'), extractor)

    assert [link.url for link in extractor.links] == ["http://caps.com/"]


def test_blank_markup_has_no_links() -> None:
    assert find_links("") == []
    assert find_links("   \n") == []


def test_url_host_rejects_control_characters() -> None:
    with pytest.raises(ValueError):
        url_host("http://exa\x00mple.com/")


def test_port_outside_tcp_range_is_kept_as_written() -> None:
    links = find_links('<a href="http://o.com:99999/">o</a>')

    assert [link.domain for link in links] == ["o.com:99999"]


def test_markup_with_xml_declaration_still_yields_links() -> None:
    links = find_links('<?xml version="1.0" encoding="utf-8"?><p><a href="http://o.com/">o</a></p>')

    assert [link.url for link in links] == ["http://o.com/"]


def test_comment_only_markup_has_no_links() -> None:
    assert find_links("<!-- hi -->") == []
