"""vcdi_disclose - selective disclosure for Data Integrity credentials.

This package prepares a JSON-LD credential for selective disclosure:
- Skolemization of blank nodes into URNs and back
- RDFC-1.0 canonicalization with pluggable blank node relabeling
- HMAC-based and shuffled label map factories
- JSON Pointer selection of compact documents
- Grouping of canonical quads into matching / non-matching sets
- Hashing of mandatory quads

Usage:
    from vcdi_disclose import canonicalize_and_group, create_hmac
    from vcdi_disclose.canonicalize import create_hmac_id_label_map_function
    from vcdi_disclose.select import select_jsonld
"""

__version__ = "0.1.0"

_EXPORTS = {
    "vcdi_disclose.errors": (
        "ErrorCode",
        "DisclosureError",
        "DocumentContentError",
        "DocumentTransformError",
        "ProofGenerationError",
        "CanonicalizationLimitError",
        "CanonicalizationAbortedError",
    ),
    "vcdi_disclose.options": ("DisclosureOptions",),
    "vcdi_disclose.interfaces": (
        "CanonicalDataset",
        "Canonicalizer",
        "DocumentTransformer",
    ),
    "vcdi_disclose.skolemize": (
        "skolemize_nquads",
        "deskolemize_nquads",
        "skolemize_expanded_jsonld",
        "skolemize_compact_jsonld",
        "to_deskolemized_nquads",
    ),
    "vcdi_disclose.canonicalize": (
        "relabel_blank_nodes",
        "label_replacement_canonicalize_nquads",
        "label_replacement_canonicalize_jsonld",
        "create_label_map_function",
        "create_hmac_id_label_map_function",
        "create_shuffled_id_label_map_function",
    ),
    "vcdi_disclose.select": (
        "json_pointer_to_paths",
        "create_initial_selection",
        "select_paths",
        "select_jsonld",
        "select_canonical_nquads",
    ),
    "vcdi_disclose.group": ("canonicalize_and_group",),
    "vcdi_disclose.hashing": (
        "create_hasher",
        "create_hmac",
        "generate_hmac_key",
        "hash_mandatory_nquads",
    ),
}


# Use lazy imports to avoid RuntimeWarning when running modules directly
def __getattr__(name):
    """Lazy import so ``python -m vcdi_disclose.<module>`` stays clean."""
    import importlib

    for module_name, names in _EXPORTS.items():
        if name in names:
            return getattr(importlib.import_module(module_name), name)
    raise AttributeError(f"module 'vcdi_disclose' has no attribute {name!r}")


__all__ = [
    # Errors
    "ErrorCode",
    "DisclosureError",
    "DocumentContentError",
    "DocumentTransformError",
    "ProofGenerationError",
    "CanonicalizationLimitError",
    "CanonicalizationAbortedError",
    # Options and collaborators
    "DisclosureOptions",
    "CanonicalDataset",
    "Canonicalizer",
    "DocumentTransformer",
    # Skolemization
    "skolemize_nquads",
    "deskolemize_nquads",
    "skolemize_expanded_jsonld",
    "skolemize_compact_jsonld",
    "to_deskolemized_nquads",
    # Canonicalization
    "relabel_blank_nodes",
    "label_replacement_canonicalize_nquads",
    "label_replacement_canonicalize_jsonld",
    "create_label_map_function",
    "create_hmac_id_label_map_function",
    "create_shuffled_id_label_map_function",
    # Selection
    "json_pointer_to_paths",
    "create_initial_selection",
    "select_paths",
    "select_jsonld",
    "select_canonical_nquads",
    # Grouping
    "canonicalize_and_group",
    # Hashing
    "create_hasher",
    "create_hmac",
    "generate_hmac_key",
    "hash_mandatory_nquads",
]
