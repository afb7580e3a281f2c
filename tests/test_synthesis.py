"""Tests for exact selector synthesis."""

from __future__ import annotations

from pathlib import Path

import pytest

from smartselector import DocumentTree, SoupQuery, exact_selector, smart_selector
from smartselector.synthesis import (
    arithmetic_stride,
    candidate_fragments,
    class_selectors,
    drop_implicit_trailing,
)

FIXTURE_DIR = Path(__file__).parent / "fixtures"


def _load(name: str) -> SoupQuery:
    html = (FIXTURE_DIR / name).read_text(encoding="utf-8")
    return SoupQuery(DocumentTree.from_html(html))


def _parse(html: str) -> SoupQuery:
    return SoupQuery(DocumentTree.from_html(html))


@pytest.mark.parametrize(
    "source",
    [
        "td",
        "tr > td:first-child",
        "table.grid tr:nth-child(3n)",
        "ul.tags li",
        "ul.tags > li:nth-child(odd)",
        "dd span.value",
        "dt",
        "h1.title",
        "title",
        "li:nth-child(2), dt:nth-child(3)",
    ],
)
def test_exact_selector_matches_exactly_the_input(source):
    query = _load("catalog.html")
    nodes = query.query(source)
    assert nodes
    selector = exact_selector(nodes, query)
    assert set(query.query(selector)) == set(nodes)
    # rebuilding from the matches gives back the same text
    assert exact_selector(query.query(selector), query) == selector


def test_regular_list_uses_container_class():
    query = _parse(
        """<html><body><div id="main">
        <ul class="list"><li class="item">A</li><li class="item">B</li><li class="item">C</li></ul>
        <ul class="other"><li class="item">X</li></ul>
        </div></body></html>"""
    )
    nodes = query.query("ul.list > li")
    assert exact_selector(nodes, query) == ".list > .item"


def test_single_node_prefers_id():
    query = _load("catalog.html")
    header = query.query("div")[0]
    assert smart_selector(header, query) == "#header"


def test_shared_class_resolves_without_context():
    query = _load("listing.html")
    names = query.query("h3.name")
    assert exact_selector(names, query) == ".name"


@pytest.mark.parametrize(
    "html, source, expected",
    [
        (
            '<html><head><meta charset="utf-8"></head><body><div><meta itemprop="x"></div></body></html>',
            "div > meta",
            "div > meta",
        ),
        (
            "<html><head><title>Page</title></head><body><svg><title>Icon</title></svg></body></html>",
            "head > title",
            "head > title",
        ),
        (
            "<html><head><title>Page</title></head><body><svg><title>Icon</title></svg></body></html>",
            "svg > title",
            "svg > title",
        ),
    ],
)
def test_selector_does_not_match_same_tag_under_other_root(html, source, expected):
    query = _parse(html)
    nodes = query.query(source)
    assert len(nodes) == 1
    selector = exact_selector(nodes, query)
    assert query.query(selector) == nodes
    assert selector == expected


def test_unresolvable_depth_falls_back_to_pinned_paths():
    query = _parse(
        """<html><body>
        <ul class="a"><li>1</li><li>2</li></ul>
        <ul class="b"><li>3</li><li>4</li></ul>
        </body></html>"""
    )
    items = query.query("li")
    selector = exact_selector([items[0], items[3]], query)
    assert selector == "body > ul:nth-child(1) > li:nth-child(1), body > ul:nth-child(2) > li:nth-child(2)"
    assert query.query(selector) == [items[0], items[3]]


def test_implicit_tbody_is_optional():
    query = _parse(
        """<html><body>
        <div class="a"><table><tbody><tr><td>1</td></tr><tr><td>2</td></tr></tbody></table></div>
        <div class="b"><table><tr><td>3</td></tr></table></div>
        </body></html>"""
    )
    rows = query.query("div.a tr")
    assert len(rows) == 2
    selector = exact_selector(rows, query)
    assert selector == ".a > table > tr, .a > table > tbody > tr"
    assert query.query(selector) == rows


def test_drop_implicit_trailing_removes_redundant_alternative():
    groups = [["table", "table > tbody"], ["div > tbody"]]
    assert drop_implicit_trailing(groups) == ["table", "div > tbody"]


def test_candidate_fragments_ranking():
    query = _parse('<html><body><ul><li class="x y">1</li><li class="x">2</li><li class="x">3</li></ul></body></html>')
    items = query.query("li")
    assert class_selectors(items) == [".x"]
    candidates = candidate_fragments(items)
    assert candidates[:3] == [[".x"], ["li"], ["li.x"]]
    assert ["li:nth-child(n+1)"] in candidates
    assert ["li:nth-child(1)", "li:nth-child(2)", "li:nth-child(3)"] in candidates
    assert candidate_fragments(items[:1])[0] == [".x"]
    assert candidate_fragments(items, generalize=True) == [["li.x"]]


def test_arithmetic_stride():
    assert arithmetic_stride([1, 3, 5]) == 2
    assert arithmetic_stride([2]) is None
    assert arithmetic_stride([1, 2, 4]) is None
