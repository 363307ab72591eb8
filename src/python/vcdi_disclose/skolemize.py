"""Skolemization: reversible replacement of blank nodes with URNs.

Selection works on a JSON tree, and a JSON tree cannot address anonymous
nodes. Skolemizing gives every node an ``@id`` of the form
``urn:<scheme>:<label>`` so that a selected fragment converts to quads whose
nodes line up with the full document's quads. Deskolemizing turns those URNs
back into blank nodes with the same labels.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from vcdi_disclose.errors import DocumentContentError
from vcdi_disclose.interfaces import DocumentTransformer, default_transformer
from vcdi_disclose.jsonvalue import JsonKind, deep_copy, json_kind
from vcdi_disclose.nquads import (
    BLANK_NODE_PREFIX,
    rewrite_blank_nodes,
    rewrite_urns,
    split_nquads,
)
from vcdi_disclose.options import DEFAULT_URN_SCHEME, DisclosureOptions, resolve_options

logger = logging.getLogger(__name__)


@dataclass
class SkolemizationContext:
    """Mutable state threaded through one skolemization walk.

    Attributes:
        urn_scheme: Scheme placed between ``urn:`` and the label.
        random_string: Seed shared by every synthesized label in this walk.
        count: Next counter value for a synthesized label.
    """

    urn_scheme: str = DEFAULT_URN_SCHEME
    random_string: str = ""
    count: int = 0

    def __post_init__(self):
        if not self.random_string:
            self.random_string = uuid.uuid4().hex

    def issue(self) -> str:
        """Synthesize the next identifier for an unlabeled node."""
        urn = f"urn:{self.urn_scheme}:_{self.random_string}_{self.count}"
        self.count += 1
        return urn


@dataclass
class SkolemizedDocument:
    """Expanded and compact forms of the same skolemized document."""

    expanded: list[dict]
    compact: dict


# ---------------------------------------------------------------------------
# N-Quads
# ---------------------------------------------------------------------------


def skolemize_nquads(nquads: list[str], urn_scheme: str) -> list[str]:
    """Replace every blank node token ``_:<id>`` with ``<urn:<scheme>:<id>>``.

    Reversed by :func:`deskolemize_nquads` with the same scheme.
    """
    return [
        rewrite_blank_nodes(quad, lambda label: f"<urn:{urn_scheme}:{label}>")
        for quad in nquads
    ]


def deskolemize_nquads(nquads: list[str], urn_scheme: str) -> list[str]:
    """Replace every ``<urn:<scheme>:<id>>`` IRI with the blank node ``_:<id>``."""
    return [
        rewrite_urns(quad, urn_scheme, lambda label: BLANK_NODE_PREFIX + label)
        for quad in nquads
    ]


# ---------------------------------------------------------------------------
# JSON-LD
# ---------------------------------------------------------------------------


def skolemize_expanded_jsonld(
    expanded: list,
    urn_scheme: str | None = None,
    random_string: str | None = None,
    count: int = 0,
) -> list:
    """Give every node in an expanded JSON-LD document a skolem ``@id``.

    Nodes that already carry an IRI keep it. Blank node ids (``_:b0``) keep
    their label under the URN scheme (``urn:<scheme>:b0``). Nodes without an
    ``@id`` get ``urn:<scheme>:_<random_string>_<count>``.

    Args:
        expanded: An expanded JSON-LD document (a list of node objects).
        urn_scheme: URN scheme, ``custom-scheme`` by default.
        random_string: Seed for synthesized labels; a fresh UUID by default.
        count: First counter value for synthesized labels.

    Returns:
        A new, skolemized expanded document. ``expanded`` is not modified.

    Raises:
        DocumentContentError: If a node's ``@id`` is not a string.
    """
    context = SkolemizationContext(
        urn_scheme=urn_scheme or DEFAULT_URN_SCHEME,
        random_string=random_string or "",
        count=count,
    )
    return _skolemize_elements(expanded, context)


def _skolemize_elements(elements: list, context: SkolemizationContext) -> list:
    skolemized = []
    for element in elements:
        if element is None:
            continue
        if json_kind(element) is not JsonKind.OBJECT or "@value" in element:
            skolemized.append(deep_copy(element))
            continue
        skolemized.append(_skolemize_node(element, context))
    return skolemized


def _skolemize_node(node: dict, context: SkolemizationContext) -> dict:
    skolemized: dict[str, Any] = {}
    for prop, value in node.items():
        if json_kind(value) is JsonKind.ARRAY:
            skolemized[prop] = _skolemize_elements(value, context)
        else:
            wrapped = _skolemize_elements([value], context)
            skolemized[prop] = wrapped[0] if wrapped else None

    node_id = skolemized.get("@id")
    if node_id is None or node_id == "":
        skolemized["@id"] = context.issue()
    elif not isinstance(node_id, str):
        raise DocumentContentError(
            f"The value of @id must be a string, got {type(node_id).__name__}"
        )
    elif node_id.startswith(BLANK_NODE_PREFIX):
        label = node_id[len(BLANK_NODE_PREFIX) :]
        skolemized["@id"] = f"urn:{context.urn_scheme}:{label}"
    return skolemized


def skolemize_compact_jsonld(
    document: dict,
    urn_scheme: str | None = None,
    random_string: str | None = None,
    *,
    transformer: DocumentTransformer | None = None,
    options: DisclosureOptions | None = None,
) -> SkolemizedDocument:
    """Skolemize a compact JSON-LD document.

    The document is expanded, skolemized, and compacted again with its own
    top-level ``@context``.

    Args:
        document: A compact JSON-LD document with one top-level ``@context``.
        urn_scheme: URN scheme; overrides ``options.urn_scheme``.
        random_string: Seed for synthesized labels.
        transformer: Document transformer; PyLD by default.
        options: Per-call options.

    Returns:
        The skolemized document in expanded and compact form.

    Raises:
        DocumentContentError: If the document has no single top-level
            ``@context``.
    """
    options = resolve_options(options, urn_scheme)
    transformer = transformer or default_transformer()

    if json_kind(document) is not JsonKind.OBJECT:
        raise DocumentContentError(
            "The document must be a single JSON object with one top-level @context"
        )
    context = document.get("@context")
    if not context:
        raise DocumentContentError(
            "The document must use exactly one @context property at the top level"
        )

    expanded = transformer.expand(document, options)
    skolemized_expanded = skolemize_expanded_jsonld(
        expanded, options.urn_scheme, random_string
    )
    skolemized_compact = transformer.compact(skolemized_expanded, context, options)
    logger.debug("Skolemized document under urn:%s", options.urn_scheme)
    return SkolemizedDocument(expanded=skolemized_expanded, compact=skolemized_compact)


def to_deskolemized_nquads(
    skolemized_document: Any,
    urn_scheme: str | None = None,
    *,
    transformer: DocumentTransformer | None = None,
    options: DisclosureOptions | None = None,
) -> list[str]:
    """Convert a skolemized document to N-Quads with its blank nodes restored.

    Args:
        skolemized_document: Expanded or compact skolemized JSON-LD.
        urn_scheme: Must match the scheme used to skolemize.
        transformer: Document transformer; PyLD by default.
        options: Per-call options.

    Returns:
        Quad lines, each ending in a line break.
    """
    options = resolve_options(options, urn_scheme)
    transformer = transformer or default_transformer()

    dataset = transformer.to_rdf(skolemized_document, options)
    skolemized_nquads = split_nquads(dataset)
    return deskolemize_nquads(skolemized_nquads, options.urn_scheme)
