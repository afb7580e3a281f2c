"""Minimal demo computing record and field selectors for inline HTML."""

from smartselector import (
    ContainerDefinition,
    DocumentTree,
    FieldSet,
    SoupQuery,
    update_structure_selectors,
)
from smartselector.output import PrintWriter


def main() -> None:
    html = """<html><head><title>Demo</title></head><body>
    <ul class="news">
      <li><a href="/1">First story</a><span class="date">Mon</span></li>
      <li><a href="/2">Second story</a><span class="date">Tue</span></li>
      <li><a href="/3">Third story</a></li>
    </ul>
    </body></html>"""

    query = SoupQuery(DocumentTree.from_html(html))
    structure = [
        ContainerDefinition(
            name="story",
            children=[
                # two samples are enough to cover the whole list
                FieldSet.from_selectors("title", query, ["li:nth-child(1) > a", "li:nth-child(2) > a"]),
                FieldSet.from_selectors("date", query, ["li:nth-child(1) > .date"]),
            ],
        )
    ]

    PrintWriter().write(update_structure_selectors(structure, query))


if __name__ == "__main__":
    main()
