"""N-Quads line helpers and the blank node token grammar.

A quad line is ``subject predicate object [graph] .`` followed by a line
break. Blank node tokens are ``_:`` followed by one or more non-whitespace
characters. IRIs (``<...>``) and quoted literals are scanned as whole tokens,
so a ``_:`` that appears inside either is never mistaken for a blank node.
"""

import re
from typing import Callable, Iterable

BLANK_NODE_PREFIX = "_:"

_LITERAL = r'"(?:[^"\\]|\\.)*"'
_IRI = r"<[^>]*>"

# group 1 holds the label of a blank node token; literals and IRIs match
# without a group so they are copied unchanged
_BLANK_NODE_TOKEN = re.compile(rf"{_LITERAL}|{_IRI}|_:(\S+)")


def rewrite_blank_nodes(quad: str, replace: Callable[[str], str]) -> str:
    """Rewrite every blank node token in ``quad``.

    Args:
        quad: A single N-Quad line.
        replace: Called with each blank node label (without ``_:``); its
            return value replaces the whole token.

    Returns:
        The rewritten quad line.
    """

    def _sub(match: re.Match) -> str:
        label = match.group(1)
        if label is None:
            return match.group(0)
        return replace(label)

    return _BLANK_NODE_TOKEN.sub(_sub, quad)


def rewrite_urns(quad: str, urn_scheme: str, replace: Callable[[str], str]) -> str:
    """Rewrite every ``<urn:<scheme>:<label>>`` IRI in ``quad``.

    ``replace`` is called with the label and its result replaces the IRI
    including its angle brackets.
    """
    pattern = _urn_pattern(urn_scheme)

    def _sub(match: re.Match) -> str:
        label = match.group(1)
        if label is None:
            return match.group(0)
        return replace(label)

    return pattern.sub(_sub, quad)


def _urn_pattern(urn_scheme: str) -> re.Pattern:
    return re.compile(rf"{_LITERAL}|<urn:{re.escape(urn_scheme)}:([^>]+)>|{_IRI}")


def blank_node_labels(quads: Iterable[str]) -> set[str]:
    """Return the set of blank node labels used in ``quads``."""
    labels: set[str] = set()
    for quad in quads:
        for match in _BLANK_NODE_TOKEN.finditer(quad):
            if match.group(1) is not None:
                labels.add(match.group(1))
    return labels


def split_nquads(dataset: str) -> list[str]:
    """Split serialized N-Quads into lines, each keeping its line break."""
    if not dataset:
        return []
    lines = dataset.split("\n")
    # a well-formed dataset ends with a line break, leaving an empty tail
    if lines[-1] == "":
        lines.pop()
    return [line + "\n" for line in lines if line.strip()]


def join_nquads(quads: Iterable[str]) -> str:
    """Join quad lines back into a serialized dataset."""
    return "".join(quads)


def strip_blank_prefix(label: str) -> str:
    """Remove a leading ``_:`` from ``label`` if present."""
    if label.startswith(BLANK_NODE_PREFIX):
        return label[len(BLANK_NODE_PREFIX) :]
    return label
