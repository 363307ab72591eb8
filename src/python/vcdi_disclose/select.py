"""JSON Pointer selection over compact JSON-LD documents.

A selection is the smallest fragment of a compact document that contains
every pointed-to value plus the ``id`` and ``type`` of every node on the way
there. Converted to quads and relabeled with the full document's label map,
a selection of a skolemized document yields a subset of the full document's
canonical quads.

The document is assumed to alias ``@id`` and ``@type`` to ``id`` and ``type``
and to carry a single top-level ``@context``.

CLI Usage:
    python -m vcdi_disclose.select --help
    python -m vcdi_disclose.select --document vc.json --pointer /issuer
    python -m vcdi_disclose.select --document vc.json --pointer /credentialSubject/name --quads
"""

import argparse
import json
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from vcdi_disclose.canonicalize import relabel_blank_nodes
from vcdi_disclose.errors import DisclosureError, DocumentContentError, ProofGenerationError
from vcdi_disclose.interfaces import DocumentTransformer, LabelMap, default_transformer
from vcdi_disclose.jsonvalue import JsonKind, deep_copy, json_kind
from vcdi_disclose.nquads import BLANK_NODE_PREFIX
from vcdi_disclose.options import DisclosureOptions, resolve_options
from vcdi_disclose.skolemize import to_deskolemized_nquads

logger = logging.getLogger(__name__)

PathSegment = int | str

_ARRAY_INDEX = re.compile(r"[0-9]+")
_ESCAPE = re.compile(r"~(.?)")
_UNESCAPES = {"1": "/", "0": "~"}


class _Unset:
    """Placeholder for array slots no pointer has selected yet."""

    def __repr__(self):
        return "<unset>"


_UNSET = _Unset()
_MISSING = object()


@dataclass
class SelectionResult:
    """A selection and its quads.

    Attributes:
        selection_document: The selected fragment, or None if nothing was
            selected.
        deskolemized_nquads: The fragment's quads with skolem URNs turned
            back into blank nodes.
        nquads: ``deskolemized_nquads`` relabeled with the full document's
            label map.
    """

    selection_document: dict | None
    deskolemized_nquads: list[str]
    nquads: list[str]


# ---------------------------------------------------------------------------
# JSON Pointer
# ---------------------------------------------------------------------------


def json_pointer_to_paths(pointer: str) -> list[PathSegment]:
    """Parse a JSON Pointer into path segments.

    Digit-only segments become integers (array indices); other segments are
    unescaped (``~1`` -> ``/``, ``~0`` -> ``~``) and kept as strings.

    Raises:
        DocumentContentError: If the pointer is not empty and does not start
            with ``/``, or contains an invalid escape sequence.
    """
    if pointer and not pointer.startswith("/"):
        raise DocumentContentError(f"Invalid JSON Pointer {pointer!r}: must start with '/'")

    paths: list[PathSegment] = []
    for segment in pointer.split("/")[1:]:
        if "~" not in segment:
            paths.append(int(segment) if _ARRAY_INDEX.fullmatch(segment) else segment)
        else:
            paths.append(_ESCAPE.sub(lambda m: _unescape(m, pointer), segment))
    return paths


def _unescape(match: re.Match, pointer: str) -> str:
    try:
        return _UNESCAPES[match.group(1)]
    except KeyError:
        raise DocumentContentError(
            f"Invalid JSON Pointer escape sequence {match.group(0)!r} in {pointer!r}"
        ) from None


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


def create_initial_selection(source: dict) -> dict:
    """Start a selection for ``source`` with its ``id`` and ``type``.

    The ``id`` is kept only if it is not a blank node identifier.
    """
    selection: dict[str, Any] = {}
    node_id = source.get("id")
    if isinstance(node_id, str) and not node_id.startswith(BLANK_NODE_PREFIX):
        selection["id"] = node_id
    if "type" in source:
        selection["type"] = deep_copy(source["type"])
    return selection


def _source_child(parent: Any, path: PathSegment) -> Any:
    match json_kind(parent):
        case JsonKind.ARRAY:
            if isinstance(path, int) and path < len(parent):
                return parent[path]
        case JsonKind.OBJECT:
            return parent.get(str(path), _MISSING)
    return _MISSING


def _selected_child(parent: Any, path: PathSegment) -> Any:
    if isinstance(parent, list):
        if isinstance(path, int) and path < len(parent) and parent[path] is not _UNSET:
            return parent[path]
    elif isinstance(parent, dict):
        return parent.get(str(path), _MISSING)
    return _MISSING


def _set_selected(parent: Any, path: PathSegment, value: Any) -> None:
    if isinstance(parent, list) and isinstance(path, int):
        if path >= len(parent):
            parent.extend([_UNSET] * (path + 1 - len(parent)))
        parent[path] = value
    elif isinstance(parent, dict):
        parent[str(path)] = value
    else:
        raise ProofGenerationError(f"JSON path {path!r} does not match the given document")


def select_paths(
    paths: list[PathSegment],
    document: dict,
    selection_document: dict,
    arrays: list[list],
) -> None:
    """Walk ``paths`` through ``document`` and copy the target into the selection.

    Nodes along the way are added to ``selection_document`` as initial
    selections; arrays along the way are added empty and recorded in
    ``arrays`` so they can be densified once every pointer has been applied.

    Raises:
        ProofGenerationError: If a path segment does not exist in ``document``.
    """
    value: Any = document
    selected_parent: Any = selection_document
    selected_value: Any = selection_document

    for path in paths:
        selected_parent = selected_value
        value = _source_child(value, path)
        if value is _MISSING:
            raise ProofGenerationError(
                f"JSON path {path!r} does not match the given document"
            )

        selected_value = _selected_child(selected_parent, path)
        if selected_value is _MISSING:
            match json_kind(value):
                case JsonKind.ARRAY:
                    selected_value = []
                    arrays.append(selected_value)
                case JsonKind.OBJECT:
                    selected_value = create_initial_selection(value)
                case _:
                    selected_value = {}
            _set_selected(selected_parent, path, selected_value)

    match json_kind(value):
        case JsonKind.ARRAY:
            selected_value = deep_copy(value)
        case JsonKind.OBJECT:
            partial = selected_value if isinstance(selected_value, dict) else {}
            selected_value = {**partial, **deep_copy(value)}
        case _:
            selected_value = value

    _set_selected(selected_parent, paths[-1], selected_value)


def select_jsonld(pointers: list[str], document: dict) -> dict | None:
    """Select the parts of ``document`` addressed by ``pointers``.

    Args:
        pointers: JSON Pointers into ``document``.
        document: A compact JSON-LD document.

    Returns:
        The selection document, or None if ``pointers`` is empty. An empty
        pointer (``""``) selects a copy of the whole document.

    Raises:
        DocumentContentError: If a pointer is malformed.
        ProofGenerationError: If a pointer does not resolve.
    """
    if not pointers:
        return None

    arrays: list[list] = []
    selection_document: dict[str, Any] = {}
    if "@context" in document:
        selection_document["@context"] = deep_copy(document["@context"])
    selection_document.update(create_initial_selection(document))

    for pointer in pointers:
        paths = json_pointer_to_paths(pointer)
        if not paths:
            return deep_copy(document)
        select_paths(paths, document, selection_document, arrays)

    for array in arrays:
        array[:] = [item for item in array if item is not _UNSET]

    logger.debug("Selected %d pointer(s), %d sparse array(s)", len(pointers), len(arrays))
    return selection_document


def select_canonical_nquads(
    pointers: list[str],
    skolemized_compact_document: dict,
    label_map: LabelMap,
    urn_scheme: str | None = None,
    *,
    transformer: DocumentTransformer | None = None,
    options: DisclosureOptions | None = None,
) -> SelectionResult:
    """Select from a skolemized document and return the selection's quads.

    The quads are relabeled with ``label_map``, the map established when the
    full document was canonicalized, so they can be compared one by one with
    the full document's canonical quads.

    Raises:
        DocumentContentError: If a pointer is malformed.
        ProofGenerationError: If a pointer does not resolve, or a blank node
            in the selection has no entry in ``label_map``.
    """
    options = resolve_options(options, urn_scheme)

    selection_document = select_jsonld(pointers, skolemized_compact_document)
    if selection_document is None:
        return SelectionResult(None, [], [])

    deskolemized_nquads = to_deskolemized_nquads(
        selection_document, transformer=transformer, options=options
    )
    nquads = relabel_blank_nodes(deskolemized_nquads, label_map)
    return SelectionResult(selection_document, deskolemized_nquads, nquads)


def main():
    """CLI entry point for JSON Pointer selection."""
    parser = argparse.ArgumentParser(
        prog="vcdi_disclose.select",
        description="Select parts of a compact JSON-LD document by JSON Pointer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m vcdi_disclose.select --document vc.json --pointer /issuer
  python -m vcdi_disclose.select --document vc.json --pointer /credentialSubject/name --quads
        """,
    )
    parser.add_argument(
        "--document", required=True, help="JSON-LD document file or '-' for stdin"
    )
    parser.add_argument(
        "--pointer",
        action="append",
        default=[],
        help="JSON Pointer to select (can be repeated)",
    )
    parser.add_argument(
        "--quads",
        action="store_true",
        help="Print the selection as N-Quads instead of JSON",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.document == "-":
        document = json.load(sys.stdin)
    else:
        document = json.loads(Path(args.document).read_text())

    try:
        selection = select_jsonld(args.pointer, document)
        if args.quads:
            if selection is not None:
                nquads = default_transformer().to_rdf(selection, DisclosureOptions())
                sys.stdout.write(nquads)
        else:
            print(json.dumps(selection, indent=2))
    except DisclosureError as e:
        print(f"Selection failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
