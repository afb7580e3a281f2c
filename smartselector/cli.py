"""Command line entry point for smartselector."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from .config import settings
from .containers import find_container, find_repeated_containers
from .generators import SelectorArena, update_structure_selectors
from .models import FieldSet
from .output import JsonWriter, PrintWriter, ResultWriter, TxtWriter
from .query import SoupQuery
from .synthesis import exact_selector
from .tree import DocumentTree
from .utils.json_utils import parse_structure
from .xpath import UnsupportedSelectorError, css_to_xpath


def _fail(message: str) -> NoReturn:
    print(f"[ERROR] {message}", file=sys.stderr)
    raise SystemExit(1)


def _load_query(path: str) -> SoupQuery:
    try:
        html = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        _fail(f"Cannot read {path}: {exc}")
    return SoupQuery(DocumentTree.from_html(html))


def _build_writer(mode: str, path: Optional[str]) -> ResultWriter:
    if mode == "txt":
        return TxtWriter(path or "selectors.txt")
    if mode == "json":
        return JsonWriter(path or "selectors.json")
    return PrintWriter()


def _print_selector(selector: str) -> None:
    print(f"selector: {selector or '-'}")
    if selector:
        print(f"xpath:    {css_to_xpath(selector)}")


def _run_select(args: argparse.Namespace) -> None:
    query = _load_query(args.html)
    field_set = FieldSet.from_selectors("field", query, args.selectors, args.reject or [])
    if not field_set.accept:
        _fail("The given selectors match no elements")
    if args.generalize:
        selector = SelectorArena(query).add_field(field_set).selector
    else:
        rejected = set(field_set.reject)
        selector = exact_selector([node for node in field_set.accept if node not in rejected], query)
    _print_selector(selector)


def _run_containers(args: argparse.Namespace) -> None:
    query = _load_query(args.html)
    fields = [query.query(selector) for selector in args.field]
    container = find_container(fields)
    if container is None:
        _fail("The given fields share no container")
    repeated = find_repeated_containers(fields, container)
    print(f"container: {exact_selector([container], query)}")
    if repeated.containers:
        print(f"repeated:  {exact_selector(repeated.containers, query)}")
        print(f"records:   {len(repeated.containers)}")
    print(f"siblings:  {repeated.siblings}")


def _run_structure(args: argparse.Namespace) -> None:
    query = _load_query(args.html)
    try:
        payload = json.loads(Path(args.structure).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        _fail(f"Cannot load structure {args.structure}: {exc}")
    results = update_structure_selectors(parse_structure(payload, query), query)
    _build_writer(args.output_mode, args.output_path).write(results)


def _run_xpath(args: argparse.Namespace) -> None:
    try:
        print(css_to_xpath(args.selector))
    except UnsupportedSelectorError as exc:
        _fail(str(exc))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser("smartselector")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level, e.g. DEBUG.")
    commands = parser.add_subparsers(dest="command", required=True)

    select = commands.add_parser("select", help="Synthesize a selector for sample elements.")
    select.add_argument("html", help="Path to a saved HTML page.")
    select.add_argument("selectors", nargs="+", help="Selectors picking the sample elements.")
    select.add_argument("--reject", action="append", help="Selector picking elements to exclude.")
    select.add_argument("--generalize", action="store_true", help="Match structurally equivalent elements too.")
    select.set_defaults(handler=_run_select)

    containers = commands.add_parser("containers", help="Detect the record container of some fields.")
    containers.add_argument("html", help="Path to a saved HTML page.")
    containers.add_argument("--field", action="append", required=True, help="Selector for one field.")
    containers.set_defaults(handler=_run_containers)

    structure = commands.add_parser("structure", help="Compute selectors for a JSON field structure.")
    structure.add_argument("html", help="Path to a saved HTML page.")
    structure.add_argument("structure", help="Path to the JSON structure definition.")
    structure.add_argument("--output-mode", default="print", choices=["print", "txt", "json"], help="Output backend.")
    structure.add_argument("--output-path", default=None, help="File path for txt/json outputs.")
    structure.set_defaults(handler=_run_structure)

    xpath = commands.add_parser("xpath", help="Translate a generated selector to XPath.")
    xpath.add_argument("selector", help="Selector text.")
    xpath.set_defaults(handler=_run_xpath)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    args.handler(args)


if __name__ == "__main__":
    main()
