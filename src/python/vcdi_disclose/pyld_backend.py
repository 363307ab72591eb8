"""PyLD implementations of the document transformer and canonicalizer.

Requires the ``jsonld`` extra (``pip install vcdi-disclose[jsonld]``).
"""

import logging
from typing import Any

from pyld import jsonld

from vcdi_disclose.errors import (
    CanonicalizationAbortedError,
    CanonicalizationLimitError,
    DocumentTransformError,
)
from vcdi_disclose.interfaces import CanonicalDataset
from vcdi_disclose.nquads import BLANK_NODE_PREFIX, rewrite_blank_nodes
from vcdi_disclose.options import SUPPORTED_ALGORITHMS, DisclosureOptions

logger = logging.getLogger(__name__)

NQUADS_FORMAT = "application/n-quads"


def _pyld_options(options: DisclosureOptions | None, **extra: Any) -> dict:
    opts: dict[str, Any] = {}
    if options is not None and options.document_loader is not None:
        opts["documentLoader"] = options.document_loader
    opts.update(extra)
    return opts


class PyLdTransformer:
    """JSON-LD expansion, compaction and RDF serialization via PyLD."""

    def expand(
        self, document: Any, options: DisclosureOptions | None = None
    ) -> list[dict]:
        try:
            return jsonld.expand(document, _pyld_options(options))
        except jsonld.JsonLdError as e:
            raise DocumentTransformError(f"JSON-LD expansion failed: {e}") from e

    def compact(
        self,
        expanded: Any,
        context: Any,
        options: DisclosureOptions | None = None,
    ) -> dict:
        try:
            return jsonld.compact(expanded, context, _pyld_options(options))
        except jsonld.JsonLdError as e:
            raise DocumentTransformError(f"JSON-LD compaction failed: {e}") from e

    def to_rdf(self, document: Any, options: DisclosureOptions | None = None) -> str:
        opts = _pyld_options(
            options, format=NQUADS_FORMAT, produceGeneralizedRdf=False
        )
        try:
            return jsonld.to_rdf(document, opts)
        except jsonld.JsonLdError as e:
            raise DocumentTransformError(
                f"JSON-LD to RDF conversion failed: {e}"
            ) from e


class _BoundedURDNA2015(jsonld.URDNA2015):
    """URDNA2015 with a deep-iteration bound and a cancellation check."""

    def __init__(self, options: DisclosureOptions):
        super().__init__()
        self._options = options
        self._deep_iterations: dict[str, int] = {}
        self._max_deep_iterations: float | None = None

    def hash_first_degree_quads(self, id_):
        self._check_aborted()
        return super().hash_first_degree_quads(id_)

    def hash_n_degree_quads(self, id_, issuer):
        self._check_aborted()
        if self._max_deep_iterations is None:
            # first call happens once only non-unique blank nodes remain
            self._max_deep_iterations = self._deep_iteration_limit()
        iterations = self._deep_iterations.get(id_, 0) + 1
        if iterations > self._max_deep_iterations:
            raise CanonicalizationLimitError(
                f"Maximum deep iterations exceeded ({self._max_deep_iterations}) "
                f"while canonicalizing blank node {id_}"
            )
        self._deep_iterations[id_] = iterations
        return super().hash_n_degree_quads(id_, issuer)

    def _deep_iteration_limit(self) -> float:
        if self._options.max_deep_iterations is not None:
            return self._options.max_deep_iterations
        if self._options.max_work_factor == 0:
            return 0
        non_unique = sum(len(ids) for ids in self.hash_to_blank_nodes.values())
        return max(non_unique, 1) ** self._options.max_work_factor

    def _check_aborted(self):
        if self._options.aborted():
            raise CanonicalizationAbortedError("Canonicalization was aborted")


class PyLdCanonicalizer:
    """RDFC-1.0 canonicalization using PyLD's URDNA2015 implementation."""

    def canonicalize(
        self, nquads: str, options: DisclosureOptions | None = None
    ) -> CanonicalDataset:
        options = options or DisclosureOptions()
        if options.algorithm not in SUPPORTED_ALGORITHMS or (
            options.reject_urdna2015 and options.algorithm == "URDNA2015"
        ):
            raise ValueError(
                f"Unsupported canonicalization algorithm: {options.algorithm!r}"
            )

        # PyLD only parses labels of the form [A-Za-z][A-Za-z0-9]*
        aliases: dict[str, str] = {}

        def _alias(label: str) -> str:
            if label not in aliases:
                aliases[label] = f"a{len(aliases)}"
            return BLANK_NODE_PREFIX + aliases[label]

        aliased = "".join(
            rewrite_blank_nodes(line, _alias)
            for line in nquads.splitlines(keepends=True)
        )

        try:
            dataset = jsonld.JsonLdProcessor.parse_nquads(aliased)
        except jsonld.JsonLdError as e:
            raise DocumentTransformError(f"Invalid N-Quads input: {e}") from e

        urdna = _BoundedURDNA2015(options)
        canonical = urdna.main(dataset, {"format": NQUADS_FORMAT})

        originals = {
            BLANK_NODE_PREFIX + alias: BLANK_NODE_PREFIX + label
            for label, alias in aliases.items()
        }
        canonical_id_map = {
            originals[old]: new for old, new in urdna.canonical_issuer.existing.items()
        }
        logger.debug(
            "Canonicalized %d blank nodes with %s",
            len(canonical_id_map),
            options.algorithm,
        )
        return CanonicalDataset(nquads=canonical, canonical_id_map=canonical_id_map)
