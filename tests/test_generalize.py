"""Tests for generalized selectors, rejection and generalization distance."""

from __future__ import annotations

import math

import pytest

from smartselector import (
    DocumentTree,
    FieldSet,
    SelectionMode,
    SelectorArena,
    SoupQuery,
    create_generalized_selectors,
    element_path,
    generalization_distance,
    group_paths,
    merge_selectors,
)

LIST_HTML = """<html><body><div id="main">
<ul class="list"><li class="item">A</li><li class="item">B</li><li class="item">C</li></ul>
<ul class="other"><li class="item">X</li></ul>
</div></body></html>"""

DISTANCE_HTML = """<html><body>
<ul class="list">
<li class="item a">1</li><li class="item a">2</li><li class="item">3</li><li>4</li><li class="item a">5</li>
</ul>
<p class="note">x</p>
</body></html>"""


@pytest.fixture
def list_query() -> SoupQuery:
    return SoupQuery(DocumentTree.from_html(LIST_HTML))


def test_two_samples_generalize_to_the_whole_list(list_query):
    items = list_query.query("ul.list > li")
    field = SelectorArena(list_query).add_field(FieldSet(name="item", accept=[items[0], items[2]]))
    assert field.elements == items
    assert field.selector == ".list > .item"


def test_generalized_selectors_cover_the_samples(list_query):
    items = list_query.query("ul.list > li")
    paths = [element_path(items[0]), element_path(items[2])]
    selectors = create_generalized_selectors(group_paths(paths), list_query)
    matches = list_query.query(merge_selectors(selectors))
    assert items[0] in matches and items[2] in matches
    assert list_query.query("ul.other li")[0] not in matches


def test_rejected_node_is_excluded(list_query):
    items = list_query.query("ul.list > li")
    field_set = FieldSet(name="item", accept=[items[0], items[2]], reject=[items[1]])
    field = SelectorArena(list_query).add_field(field_set)
    assert field.generalized_selector == ".list > li:nth-child(2n+1)"
    assert field.elements == [items[0], items[2]]
    assert field.selector == ".list > li:nth-child(2n+1)"


def test_literal_mode_keeps_user_selector(list_query):
    field_set = FieldSet.from_selectors("item", list_query, ["ul.list li"], mode=SelectionMode.CSS)
    field = SelectorArena(list_query).add_field(field_set)
    assert field.selector == "ul.list li"
    assert len(field.elements) == 3


def test_field_without_samples_has_no_selector(list_query):
    field = SelectorArena(list_query).add_field(FieldSet(name="empty"))
    assert field.selector == ""
    assert field.xpath is None
    assert field.elements == []


def test_generalization_distance():
    query = SoupQuery(DocumentTree.from_html(DISTANCE_HTML))
    first, second, third, fourth, fifth = query.query("li")
    note = query.query("p")[0]

    assert generalization_distance(first, [first, second]) == 0
    assert generalization_distance(note, [first, second]) == math.inf
    assert generalization_distance(third, [first, second]) == 2
    assert generalization_distance(fourth, [first, second]) == math.inf
    assert generalization_distance(fifth, [first, second]) == math.inf
    assert generalization_distance(second, [first]) == 1


def test_field_context_distance_uses_its_elements():
    query = SoupQuery(DocumentTree.from_html(DISTANCE_HTML))
    items = query.query("li")
    field_set = FieldSet.from_selectors("item", query, ["li:nth-child(1)", "li:nth-child(2)"], mode=SelectionMode.CSS)
    field = SelectorArena(query).add_field(field_set)
    assert field.generalization_distance(items[2]) == 2
