"""Error types raised by the selective disclosure engine.

Input errors, proof generation errors and canonicalization bound errors are
kept as distinct classes so a caller can tell a malformed document apart from
a disclosure that cannot be produced, and both apart from a graph that is too
expensive to canonicalize.

Every error carries an ``ErrorCode``. When surfaced over HTTP the ``type``
property gives the URL used by the data-integrity error registry.
"""

from enum import Enum

SECURITY_VOCAB = "https://w3id.org/security#"


class ErrorCode(Enum):
    """Error codes for disclosure-time failures."""

    DOCUMENT_CONTENT_ERROR = "DOCUMENT_CONTENT_ERROR"
    DOCUMENT_TRANSFORM_ERROR = "DOCUMENT_TRANSFORM_ERROR"
    PROOF_GENERATION_ERROR = "PROOF_GENERATION_ERROR"
    CANONICALIZATION_LIMIT_ERROR = "CANONICALIZATION_LIMIT_ERROR"
    CANONICALIZATION_ABORTED_ERROR = "CANONICALIZATION_ABORTED_ERROR"


class DisclosureError(Exception):
    """Base class for all errors raised by vcdi_disclose."""

    code = ErrorCode.PROOF_GENERATION_ERROR

    def __init__(self, message: str, *, title: str | None = None):
        super().__init__(message)
        self.message = message
        self.title = title or type(self).__name__

    @property
    def type(self) -> str:
        return f"{SECURITY_VOCAB}{self.code.value}"


class DocumentContentError(DisclosureError, ValueError):
    """The input document or JSON Pointer is malformed."""

    code = ErrorCode.DOCUMENT_CONTENT_ERROR


class DocumentTransformError(DisclosureError):
    """Expansion, compaction or RDF serialization of a document failed."""

    code = ErrorCode.DOCUMENT_TRANSFORM_ERROR


class ProofGenerationError(DisclosureError):
    """A disclosure could not be derived from an otherwise valid document."""

    code = ErrorCode.PROOF_GENERATION_ERROR


class CanonicalizationLimitError(DisclosureError):
    """Canonicalization exceeded its work bound and was stopped."""

    code = ErrorCode.CANONICALIZATION_LIMIT_ERROR


class CanonicalizationAbortedError(DisclosureError):
    """Canonicalization was cancelled by the caller."""

    code = ErrorCode.CANONICALIZATION_ABORTED_ERROR
