"""Tests for the document arena and path indexing helpers."""

from __future__ import annotations

from pathlib import Path

from smartselector import (
    DocumentTree,
    SoupQuery,
    element_path,
    group_paths,
    path_selector,
    position_in_parent,
    unique_path_selector,
)
from smartselector.paths import get_parents, get_previous_siblings

FIXTURE_DIR = Path(__file__).parent / "fixtures"


def _load(name: str) -> SoupQuery:
    html = (FIXTURE_DIR / name).read_text(encoding="utf-8")
    return SoupQuery(DocumentTree.from_html(html))


def test_tree_orders_nodes_in_document_order():
    query = _load("listing.html")
    tree = query.tree
    assert tree.root.name == "html"
    orders = [node.order for node in tree]
    assert orders == sorted(orders)
    names = query.query("h3.name")
    assert [node.text for node in names] == ["Alpha", "Beta", "Gamma", "Delta", "Epsilon"]
    assert all(earlier.order < later.order for earlier, later in zip(names, names[1:]))


def test_node_navigation():
    query = _load("listing.html")
    items = query.query("ul.products > li")
    assert [position_in_parent(item) for item in items] == [1, 2, 3, 4, 5]
    assert items[0].previous_sibling is None
    assert items[1].previous_sibling is items[0]
    assert items[0].next_sibling is items[1]
    assert items[-1].next_sibling is None
    assert items[2].parent.classes == ("products",)
    assert items[2].parent.contains(items[2].children[0])
    assert not items[0].contains(items[1])


def test_element_path_excludes_document_element():
    query = _load("listing.html")
    name = query.query("h3.name")[0]
    path = element_path(name)
    assert [node.name for node in path] == ["body", "div", "ul", "li", "h3"]
    assert path[-1] is name
    assert path_selector(name) == "body > div > ul > li > h3"
    assert unique_path_selector(name) == "body > div:nth-child(1) > ul:nth-child(2) > li:nth-child(1) > h3:nth-child(1)"
    assert query.query(unique_path_selector(name)) == [name]


def test_group_paths_by_shape_in_first_seen_order():
    query = _load("listing.html")
    nodes = query.query("span.price") + query.query("h3.name") + query.query("title")
    groups = group_paths([element_path(node) for node in nodes])
    assert len(groups) == 3
    assert [len(group) for group in groups] == [5, 5, 1]
    assert groups[0][0][-1].name == "span"
    assert groups[2][0][0].name == "head"
    for group in groups:
        assert len({tuple(node.name for node in path) for path in group}) == 1


def test_parents_and_previous_siblings():
    query = _load("listing.html")
    container = query.query("ul.products")[0]
    name = query.query("h3.name")[2]
    parents = get_parents(name, container)
    assert [node.name for node in parents] == ["li"]
    assert [node.name for node in get_parents(name)] == ["li", "ul", "div", "body", "html"]

    items = container.children
    assert get_previous_siblings(items[3]) == [items[2], items[1], items[0]]
    assert get_previous_siblings(items[3], items[1]) == [items[2]]
    assert get_previous_siblings(None) == []
