"""Shared fixtures for vcdi_disclose tests.

The engine is exercised against small in-process collaborators instead of a
full JSON-LD processor:

- ``InlineContextTransformer`` understands flat inline contexts (term -> IRI,
  ``@type: @id`` terms, ``id``/``type`` aliases) and produces sorted N-Quads
  with fresh ``_:b<n>`` labels for unlabeled nodes.
- ``FirstDegreeCanonicalizer`` orders blank nodes by their first-degree hash
  and labels them ``c14n0``, ``c14n1``, ...; input labels and quad order do
  not affect its output as long as every first-degree hash is unique.
"""

import copy
import hashlib
from typing import Any

import pytest

from vcdi_disclose.hashing import create_hmac
from vcdi_disclose.interfaces import CanonicalDataset
from vcdi_disclose.nquads import blank_node_labels, rewrite_blank_nodes, split_nquads

RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"
XSD = "http://www.w3.org/2001/XMLSchema#"

HMAC_KEY = bytes(range(32))

CONTEXT = {
    "id": "@id",
    "type": "@type",
    "VerifiableCredential": "https://www.w3.org/2018/credentials#VerifiableCredential",
    "IdentityCredential": "https://example.org/vocab#IdentityCredential",
    "Achievement": "https://example.org/vocab#Achievement",
    "Passport": "https://example.org/vocab#Passport",
    "issuer": {"@id": "https://www.w3.org/2018/credentials#issuer", "@type": "@id"},
    "validFrom": "https://www.w3.org/2018/credentials#validFrom",
    "credentialSubject": {
        "@id": "https://www.w3.org/2018/credentials#credentialSubject",
        "@type": "@id",
    },
    "name": "https://schema.org/name",
    "age": "https://schema.org/age",
    "verified": "https://example.org/vocab#verified",
    "achievements": "https://example.org/vocab#achievements",
    "title": "https://schema.org/title",
    "passport": "https://example.org/vocab#passport",
    "documentIdentifier": "https://example.org/vocab#documentIdentifier",
    "dateOfBirth": "https://example.org/vocab#dateOfBirth",
    "expirationDate": "https://example.org/vocab#expirationDate",
    "issuingAuthority": "https://example.org/vocab#issuingAuthority",
}


# ---------------------------------------------------------------------------
# Inline-context JSON-LD transformer
# ---------------------------------------------------------------------------


def _as_list(value: Any) -> list:
    if isinstance(value, list):
        return [v for v in value if v is not None]
    return [] if value is None else [value]


def _keyword(key: str, context: dict) -> str | None:
    if key.startswith("@"):
        return key
    definition = context.get(key)
    if definition in ("@id", "@type"):
        return definition
    return None


def _definition(definition: Any) -> tuple[str, bool]:
    if isinstance(definition, dict):
        return definition["@id"], definition.get("@type") == "@id"
    return definition, False


def _alias(keyword: str, context: dict) -> str:
    for term, definition in context.items():
        if definition == keyword:
            return term
    return keyword


class InlineContextTransformer:
    """JSON-LD expand/compact/to_rdf for flat inline contexts."""

    def expand(self, document, options=None):
        if isinstance(document, list):
            return copy.deepcopy(document)
        return [self._expand_node(document, document.get("@context", {}))]

    def compact(self, expanded, context, options=None):
        nodes = [self._compact_node(node, context) for node in expanded]
        body = nodes[0] if len(nodes) == 1 else {"@graph": nodes}
        return {"@context": copy.deepcopy(context), **body}

    def to_rdf(self, document, options=None):
        nodes = self.expand(document, options)
        labels: dict[Any, str] = {}
        quads: set[str] = set()
        for node in nodes:
            self._node_to_quads(node, quads, labels)
        return "".join(sorted(quads))

    def _expand_node(self, node: dict, context: dict) -> dict:
        expanded: dict[str, Any] = {}
        for key, value in node.items():
            if key == "@context":
                continue
            keyword = _keyword(key, context)
            if keyword == "@id":
                expanded["@id"] = value
            elif keyword == "@type":
                expanded["@type"] = [
                    _definition(context.get(t, t))[0] for t in _as_list(value)
                ]
            elif key in context:
                iri, is_id = _definition(context[key])
                expanded[iri] = [
                    self._expand_value(v, context, is_id) for v in _as_list(value)
                ]
        return expanded

    def _expand_value(self, value: Any, context: dict, is_id: bool) -> dict:
        if isinstance(value, dict):
            if "@value" in value:
                return dict(value)
            return self._expand_node(value, context)
        if is_id and isinstance(value, str):
            return {"@id": value}
        return {"@value": value}

    def _compact_node(self, node: dict, context: dict) -> dict:
        reverse = {
            _definition(definition)[0]: term
            for term, definition in context.items()
            if definition not in ("@id", "@type")
        }
        compacted: dict[str, Any] = {}
        for key, value in node.items():
            if key == "@id":
                compacted[_alias("@id", context)] = value
            elif key == "@type":
                types = [reverse.get(t, t) for t in value]
                compacted[_alias("@type", context)] = types[0] if len(types) == 1 else types
            else:
                term = reverse[key]
                is_id = _definition(context[term])[1]
                values = [self._compact_value(v, context, is_id) for v in value]
                compacted[term] = values[0] if len(values) == 1 else values
        return compacted

    def _compact_value(self, value: dict, context: dict, is_id: bool) -> Any:
        if "@value" in value:
            return value["@value"]
        if is_id and set(value) == {"@id"}:
            return value["@id"]
        return self._compact_node(value, context)

    def _subject(self, node: dict, labels: dict) -> str:
        node_id = node.get("@id")
        if node_id and not node_id.startswith("_:"):
            return f"<{node_id}>"
        key = node_id or object()
        if key not in labels:
            labels[key] = f"_:b{len(labels)}"
        return labels[key]

    def _node_to_quads(self, node: dict, quads: set, labels: dict) -> str:
        subject = self._subject(node, labels)
        for type_iri in node.get("@type", []):
            quads.add(f"{subject} <{RDF_TYPE}> <{type_iri}> .\n")
        for prop, values in node.items():
            if prop.startswith("@"):
                continue
            for value in values:
                if "@value" in value:
                    obj = _literal(value["@value"])
                else:
                    obj = self._node_to_quads(value, quads, labels)
                quads.add(f"{subject} <{prop}> {obj} .\n")
        return subject


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return f'"{str(value).lower()}"^^<{XSD}boolean>'
    if isinstance(value, int):
        return f'"{value}"^^<{XSD}integer>'
    if isinstance(value, float):
        return f'"{value!r}"^^<{XSD}double>'
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


# ---------------------------------------------------------------------------
# First-degree canonicalizer
# ---------------------------------------------------------------------------


class FirstDegreeCanonicalizer:
    """Canonical labels from first-degree hashes only."""

    def canonicalize(self, nquads, options=None):
        quads = split_nquads(nquads)
        labels = blank_node_labels(quads)

        def first_degree_hash(label: str) -> str:
            related = sorted(
                rewrite_blank_nodes(q, lambda other: "_:a" if other == label else "_:z")
                for q in quads
                if label in blank_node_labels([q])
            )
            return hashlib.sha256("".join(related).encode("utf-8")).hexdigest()

        ordered = sorted(labels, key=lambda label: (first_degree_hash(label), label))
        mapping = {label: f"c14n{i}" for i, label in enumerate(ordered)}
        canonical = sorted(
            rewrite_blank_nodes(q, lambda other: "_:" + mapping[other]) for q in quads
        )
        return CanonicalDataset(
            nquads="".join(canonical),
            canonical_id_map={f"_:{k}": f"_:{v}" for k, v in mapping.items()},
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def transformer():
    return InlineContextTransformer()


@pytest.fixture
def canonicalizer():
    return FirstDegreeCanonicalizer()


@pytest.fixture(scope="session")
def hmac_key():
    return HMAC_KEY


@pytest.fixture(scope="session")
def hmac(hmac_key):
    """HMAC-SHA256 keyed with the fixed test key."""
    return create_hmac(hmac_key)


@pytest.fixture
def credential():
    """Credential with an IRI-identified root and a blank-node subject."""
    return {
        "@context": copy.deepcopy(CONTEXT),
        "id": "https://example.org/credentials/1",
        "type": ["VerifiableCredential", "IdentityCredential"],
        "issuer": "https://example.org/issuers/1",
        "validFrom": "2024-01-01T00:00:00Z",
        "credentialSubject": {
            "name": "Alice",
            "age": 30,
            "verified": True,
            "achievements": [
                {"type": "Achievement", "title": "First"},
                {"type": "Achievement", "title": "Second"},
                {"type": "Achievement", "title": "Third"},
            ],
        },
    }


@pytest.fixture
def iri_only_credential():
    """Credential in which every node has an IRI."""
    return {
        "@context": copy.deepcopy(CONTEXT),
        "id": "https://example.org/credentials/2",
        "type": "VerifiableCredential",
        "issuer": "https://example.org/issuers/1",
        "credentialSubject": {
            "id": "https://example.org/people/alice",
            "name": "Alice",
        },
    }


@pytest.fixture
def passport_credential():
    """Credential whose subject nests a five-field passport object."""
    return {
        "@context": copy.deepcopy(CONTEXT),
        "id": "https://example.org/credentials/3",
        "type": "VerifiableCredential",
        "issuer": "https://example.org/issuers/1",
        "validFrom": "2024-01-01T00:00:00Z",
        "credentialSubject": {
            "id": "https://example.org/people/alice",
            "passport": {
                "type": "Passport",
                "documentIdentifier": "P-123",
                "dateOfBirth": "1990-01-01",
                "expirationDate": "2030-01-01",
                "issuingAuthority": "Example Authority",
            },
        },
    }
