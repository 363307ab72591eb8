"""Canonicalize a credential and group its quads by JSON Pointer selections.

Each group is a name and a list of JSON Pointers. The full document is
skolemized, canonicalized once, and every group's selection is converted to
quads relabeled with that single label map. A group's ``matching`` quads are
the full canonical quads its selection produced; ``non_matching`` are the
rest. Groups may overlap.

CLI Usage:
    python -m vcdi_disclose.group --help
    python -m vcdi_disclose.group --document vc.json --group mandatory=/issuer --hmac-key 00ff...
    python -m vcdi_disclose.group --document vc.json --group mandatory=/issuer,/validFrom --group subject=/credentialSubject
"""

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from vcdi_disclose.canonicalize import (
    create_hmac_id_label_map_function,
    label_replacement_canonicalize_nquads,
)
from vcdi_disclose.encoding import b64url_encode
from vcdi_disclose.errors import DisclosureError
from vcdi_disclose.hashing import create_hasher, create_hmac, generate_hmac_key, hash_mandatory_nquads
from vcdi_disclose.interfaces import (
    Canonicalizer,
    DocumentTransformer,
    LabelMap,
    LabelMapFactory,
    default_canonicalizer,
    default_transformer,
)
from vcdi_disclose.jsonvalue import deep_copy
from vcdi_disclose.options import DisclosureOptions
from vcdi_disclose.select import SelectionResult, select_canonical_nquads
from vcdi_disclose.skolemize import skolemize_compact_jsonld, to_deskolemized_nquads

logger = logging.getLogger(__name__)


@dataclass
class GroupResult:
    """The full canonical quads split by one group's selection.

    ``matching`` and ``non_matching`` together hold every index of the full
    canonical quad list exactly once.
    """

    matching: dict[int, str]
    non_matching: dict[int, str]
    deskolemized_nquads: list[str]


@dataclass
class CanonicalGroups:
    """Result of :func:`canonicalize_and_group`."""

    groups: dict[str, GroupResult]
    skolemized_expanded_document: list
    skolemized_compact_document: dict
    deskolemized_nquads: list[str]
    label_map: LabelMap
    nquads: list[str]


def canonicalize_and_group(
    document: dict,
    label_map_factory: LabelMapFactory,
    group_definitions: dict[str, list[str]],
    *,
    transformer: DocumentTransformer | None = None,
    canonicalizer: Canonicalizer | None = None,
    options: DisclosureOptions | None = None,
    random_string: str | None = None,
) -> CanonicalGroups:
    """Canonicalize ``document`` and partition its quads for every group.

    Args:
        document: A compact JSON-LD document with one top-level ``@context``.
        label_map_factory: Produces the final blank node labels.
        group_definitions: Group name -> JSON Pointers.
        transformer: Document transformer; PyLD by default.
        canonicalizer: Canonicalizer; PyLD's RDFC-1.0 by default.
        options: Per-call options. ``options.max_workers > 1`` evaluates
            group selections on a thread pool.
        random_string: Seed for skolem labels of unlabeled nodes.

    Returns:
        The groups plus every intermediate product a proof needs.

    Raises:
        DocumentContentError: If the document or a pointer is malformed.
        ProofGenerationError: If a pointer does not resolve.
    """
    options = options or DisclosureOptions()
    transformer = transformer or default_transformer()
    canonicalizer = canonicalizer or default_canonicalizer()

    skolemized = skolemize_compact_jsonld(
        document, random_string=random_string, transformer=transformer, options=options
    )
    deskolemized_nquads = to_deskolemized_nquads(
        skolemized.expanded, transformer=transformer, options=options
    )
    replaced = label_replacement_canonicalize_nquads(
        deskolemized_nquads,
        label_map_factory,
        canonicalizer=canonicalizer,
        options=options,
    )
    label_map = replaced.label_map
    nquads = replaced.canonical_nquads

    def _select(pointers: list[str]) -> SelectionResult:
        return select_canonical_nquads(
            pointers,
            deep_copy(skolemized.compact),
            label_map,
            transformer=transformer,
            options=options,
        )

    names = list(group_definitions)
    if options.max_workers > 1 and len(names) > 1:
        with ThreadPoolExecutor(max_workers=options.max_workers) as executor:
            selections = list(
                executor.map(_select, (group_definitions[name] for name in names))
            )
    else:
        selections = [_select(group_definitions[name]) for name in names]

    groups: dict[str, GroupResult] = {}
    for name, selection in zip(names, selections):
        selected = set(selection.nquads)
        matching: dict[int, str] = {}
        non_matching: dict[int, str] = {}
        for index, nquad in enumerate(nquads):
            if nquad in selected:
                matching[index] = nquad
            else:
                non_matching[index] = nquad
        groups[name] = GroupResult(
            matching=matching,
            non_matching=non_matching,
            deskolemized_nquads=selection.deskolemized_nquads,
        )
        logger.debug(
            "Group %r: %d matching, %d non-matching",
            name,
            len(matching),
            len(non_matching),
        )

    return CanonicalGroups(
        groups=groups,
        skolemized_expanded_document=skolemized.expanded,
        skolemized_compact_document=skolemized.compact,
        deskolemized_nquads=deskolemized_nquads,
        label_map=label_map,
        nquads=nquads,
    )


def _parse_group(value: str) -> tuple[str, list[str]]:
    name, sep, pointers = value.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(
            f"Invalid group {value!r}: expected NAME=/pointer[,/pointer...]"
        )
    return name, [p for p in pointers.split(",") if p] if pointers else []


def main():
    """CLI entry point for canonicalize-and-group."""
    parser = argparse.ArgumentParser(
        prog="vcdi_disclose.group",
        description="Canonicalize a JSON-LD credential and group its quads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m vcdi_disclose.group --document vc.json --group mandatory=/issuer --hmac-key 00ff...
  python -m vcdi_disclose.group --document vc.json --group mandatory=/issuer,/validFrom --group subject=/credentialSubject
        """,
    )
    parser.add_argument(
        "--document", required=True, help="JSON-LD document file or '-' for stdin"
    )
    parser.add_argument(
        "--group",
        action="append",
        default=[],
        type=_parse_group,
        help="Group definition NAME=/pointer[,/pointer...] (can be repeated)",
    )
    parser.add_argument(
        "--hmac-key",
        type=bytes.fromhex,
        help="Hex-encoded HMAC key for blank node labels (default: random)",
    )
    parser.add_argument("--urn-scheme", default="custom-scheme", help="Skolem URN scheme")
    parser.add_argument(
        "--hash",
        default="sha256",
        choices=["sha256", "sha384"],
        help="Hash for the mandatory group",
    )
    parser.add_argument(
        "--workers", type=int, default=1, help="Threads for group selection"
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

    key = args.hmac_key or generate_hmac_key()
    options = DisclosureOptions(urn_scheme=args.urn_scheme, max_workers=args.workers)

    try:
        result = canonicalize_and_group(
            document,
            create_hmac_id_label_map_function(create_hmac(key)),
            dict(args.group),
            options=options,
        )
    except DisclosureError as e:
        print(f"Grouping failed: {e}", file=sys.stderr)
        sys.exit(1)

    output = {
        "nquads": result.nquads,
        "labelMap": result.label_map,
        "groups": {
            name: {
                "matching": sorted(group.matching),
                "nonMatching": sorted(group.non_matching),
            }
            for name, group in result.groups.items()
        },
    }
    if "mandatory" in result.groups:
        mandatory = [
            result.nquads[i] for i in sorted(result.groups["mandatory"].matching)
        ]
        digest = hash_mandatory_nquads(mandatory, create_hasher(args.hash))
        output["mandatoryHash"] = b64url_encode(digest)

    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
