"""Basic smoke test for package imports and flow."""

from smartselector import (
    DocumentTree,
    FieldSet,
    SelectorArena,
    SoupQuery,
    css_to_xpath,
)


def test_smoke_flow():
    sample_html = """<html><head><title>Test</title></head><body>
    <div class="post"><h2>First</h2><p>Body one</p></div>
    <div class="post"><h2>Second</h2><p>Body two</p></div>
    </body></html>"""
    query = SoupQuery(DocumentTree.from_html(sample_html))

    arena = SelectorArena(query)
    container = arena.add_container("post")
    title = arena.add_field(FieldSet.from_selectors("title", query, ["div.post:nth-child(1) h2"]), parent=container.index)
    body = arena.add_field(FieldSet.from_selectors("body", query, ["p"]), parent=container.index)

    assert [node.text for node in title.elements] == ["First"]
    assert [node.text for node in body.elements] == ["Body one", "Body two"]
    assert css_to_xpath(container.selector)
    assert isinstance(title.selector, str)
