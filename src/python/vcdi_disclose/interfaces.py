"""Collaborator interfaces consumed by the disclosure engine.

The engine does not implement JSON-LD expansion/compaction or the RDF
dataset canonicalization search. It talks to them through the two protocols
below. ``default_transformer`` and ``default_canonicalizer`` build the
PyLD-backed implementations from ``vcdi_disclose.pyld_backend`` on demand, so
importing the engine never requires PyLD.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, runtime_checkable

from vcdi_disclose.options import DisclosureOptions

# bytes -> digest; used for hashers and keyed HMACs alike
Hasher = Callable[[bytes], bytes]

# Canonical id map (input label -> canonical label) -> label map
LabelMap = dict[str, str]
LabelMapFactory = Callable[[LabelMap], LabelMap]


@dataclass
class CanonicalDataset:
    """Output of a canonicalizer run.

    Attributes:
        nquads: The canonicalized dataset as serialized N-Quads.
        canonical_id_map: Input blank node identifier -> canonical
            identifier, both as the canonicalizer reports them
            (usually with the ``_:`` prefix).
    """

    nquads: str
    canonical_id_map: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class DocumentTransformer(Protocol):
    """Expands, compacts and serializes linked-data documents."""

    def expand(
        self, document: Any, options: DisclosureOptions | None = None
    ) -> list[dict]: ...

    def compact(
        self,
        expanded: Any,
        context: Any,
        options: DisclosureOptions | None = None,
    ) -> dict: ...

    def to_rdf(self, document: Any, options: DisclosureOptions | None = None) -> str:
        """Serialize ``document`` as N-Quads text."""
        ...


@runtime_checkable
class Canonicalizer(Protocol):
    """Assigns canonical identifiers to the blank nodes of a dataset."""

    def canonicalize(
        self, nquads: str, options: DisclosureOptions | None = None
    ) -> CanonicalDataset: ...


def default_transformer() -> DocumentTransformer:
    """Return the PyLD-backed document transformer."""
    from vcdi_disclose.pyld_backend import PyLdTransformer

    return PyLdTransformer()


def default_canonicalizer() -> Canonicalizer:
    """Return the PyLD-backed RDFC-1.0 canonicalizer."""
    from vcdi_disclose.pyld_backend import PyLdCanonicalizer

    return PyLdCanonicalizer()
