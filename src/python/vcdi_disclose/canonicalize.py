"""Canonicalization with label replacement.

Runs the canonicalizer, hands its canonical identifier map to a label map
factory, and rewrites the canonical quads with the labels the factory chose.
The factories below cover the three standard cases: a fixed map, HMAC-derived
labels, and shuffled sequential labels.
"""

import logging
import secrets
from dataclasses import dataclass

from vcdi_disclose.encoding import multibase_encode
from vcdi_disclose.errors import ProofGenerationError
from vcdi_disclose.interfaces import (
    Canonicalizer,
    DocumentTransformer,
    Hasher,
    LabelMap,
    LabelMapFactory,
    default_canonicalizer,
    default_transformer,
)
from vcdi_disclose.nquads import (
    BLANK_NODE_PREFIX,
    join_nquads,
    rewrite_blank_nodes,
    split_nquads,
    strip_blank_prefix,
)
from vcdi_disclose.options import DisclosureOptions

logger = logging.getLogger(__name__)

_SYSTEM_RANDOM = secrets.SystemRandom()


@dataclass
class LabelReplacementResult:
    """Canonical quads together with the label map used to produce them.

    Attributes:
        label_map: Input blank node label -> replacement label, keyed by the
            labels found in the quads that were canonicalized (no ``_:``).
        canonical_nquads: Relabeled canonical quads, sorted.
    """

    label_map: LabelMap
    canonical_nquads: list[str]


def relabel_blank_nodes(nquads: list[str], label_map: LabelMap) -> list[str]:
    """Replace each blank node label in ``nquads`` through ``label_map``.

    Raises:
        ProofGenerationError: If a label present in the quads has no entry.
    """

    def _relabel(label: str) -> str:
        try:
            return BLANK_NODE_PREFIX + label_map[label]
        except KeyError:
            raise ProofGenerationError(
                f"Label map has no entry for blank node _:{label}"
            ) from None

    return [rewrite_blank_nodes(quad, _relabel) for quad in nquads]


def label_replacement_canonicalize_nquads(
    nquads: list[str],
    label_map_factory: LabelMapFactory,
    *,
    canonicalizer: Canonicalizer | None = None,
    options: DisclosureOptions | None = None,
) -> LabelReplacementResult:
    """Canonicalize quads and relabel their blank nodes.

    Args:
        nquads: Quad lines to canonicalize.
        label_map_factory: Maps the canonical id map (prefixes stripped) to
            the final label map.
        canonicalizer: Canonicalizer; PyLD's RDFC-1.0 by default.
        options: Per-call options.

    Returns:
        The factory's label map and the sorted, relabeled canonical quads.

    Raises:
        ProofGenerationError: If the factory left a blank node unmapped.
    """
    options = options or DisclosureOptions()
    canonicalizer = canonicalizer or default_canonicalizer()

    dataset = canonicalizer.canonicalize(join_nquads(nquads), options)
    canonical_id_map = {
        strip_blank_prefix(key): strip_blank_prefix(value)
        for key, value in dataset.canonical_id_map.items()
    }

    label_map = label_map_factory(dict(canonical_id_map))
    missing = canonical_id_map.keys() - label_map.keys()
    if missing:
        raise ProofGenerationError(
            f"Label map factory left {len(missing)} blank node(s) unmapped: "
            f"{', '.join(sorted(missing))}"
        )

    # canonical label -> new label, to rewrite the canonicalizer's output
    canonical_label_map = {
        canonical_id_map[input_label]: new_label
        for input_label, new_label in label_map.items()
        if input_label in canonical_id_map
    }
    canonical_nquads = sorted(
        relabel_blank_nodes(split_nquads(dataset.nquads), canonical_label_map)
    )
    logger.debug(
        "Canonicalized %d quads, relabeled %d blank nodes",
        len(canonical_nquads),
        len(label_map),
    )
    return LabelReplacementResult(label_map, canonical_nquads)


def label_replacement_canonicalize_jsonld(
    document: dict | list,
    label_map_factory: LabelMapFactory,
    *,
    transformer: DocumentTransformer | None = None,
    canonicalizer: Canonicalizer | None = None,
    options: DisclosureOptions | None = None,
) -> LabelReplacementResult:
    """Convert a JSON-LD document to quads, then canonicalize and relabel."""
    options = options or DisclosureOptions()
    transformer = transformer or default_transformer()
    nquads = split_nquads(transformer.to_rdf(document, options))
    return label_replacement_canonicalize_nquads(
        nquads, label_map_factory, canonicalizer=canonicalizer, options=options
    )


# ---------------------------------------------------------------------------
# Label map factories
# ---------------------------------------------------------------------------


def create_label_map_function(label_map: LabelMap) -> LabelMapFactory:
    """Factory that republishes a fixed map keyed by canonical labels.

    ``label_map`` maps canonical labels (``c14n0``) to final labels. The
    returned factory maps each input label to the final label of its
    canonical label.
    """

    def label_map_factory(canonical_id_map: LabelMap) -> LabelMap:
        bnode_id_map = {}
        for input_label, canonical_label in canonical_id_map.items():
            try:
                bnode_id_map[input_label] = label_map[canonical_label]
            except KeyError:
                raise ProofGenerationError(
                    f"Label map has no entry for canonical label {canonical_label}"
                ) from None
        return bnode_id_map

    return label_map_factory


def create_hmac_id_label_map_function(
    hmac: Hasher, *, encoding: str = "base64url"
) -> LabelMapFactory:
    """Factory that labels each blank node by the HMAC of its canonical label.

    Args:
        hmac: Keyed HMAC, ``bytes -> digest``.
        encoding: Multibase encoding of the digest; ``base64url`` gives
            ``u``-prefixed labels, ``base58btc`` gives ``z``-prefixed ones.
    """

    def label_map_factory(canonical_id_map: LabelMap) -> LabelMap:
        return {
            input_label: multibase_encode(hmac(canonical_label.encode("utf-8")), encoding)
            for input_label, canonical_label in canonical_id_map.items()
        }

    return label_map_factory


def create_shuffled_id_label_map_function(
    hmac: Hasher | None = None, *, prefix: str = "b"
) -> LabelMapFactory:
    """Factory that assigns ``<prefix>0``, ``<prefix>1``, ... in shuffled order.

    With ``hmac`` the order is the sorted order of the HMAC digests of the
    canonical labels, which is stable for a given key. Without it the order
    comes from the OS random source and differs on every call.
    """

    def label_map_factory(canonical_id_map: LabelMap) -> LabelMap:
        entries = list(canonical_id_map.items())
        if hmac is not None:
            entries.sort(key=lambda entry: hmac(entry[1].encode("utf-8")))
        else:
            _SYSTEM_RANDOM.shuffle(entries)
        return {
            input_label: f"{prefix}{index}"
            for index, (input_label, _) in enumerate(entries)
        }

    return label_map_factory
