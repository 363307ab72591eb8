"""Per-call options shared by every disclosure operation.

Options are built fresh for each call and passed explicitly; nothing in this
package keeps process-wide configuration.
"""

import dataclasses
import threading
from dataclasses import dataclass
from typing import Any, Callable

DEFAULT_URN_SCHEME = "custom-scheme"
DEFAULT_ALGORITHM = "RDFC-1.0"
DEFAULT_MAX_WORK_FACTOR = 1

# Algorithm names accepted by the default canonicalizer
SUPPORTED_ALGORITHMS = ("RDFC-1.0", "URDNA2015")

DocumentLoader = Callable[..., dict]


@dataclass(frozen=True)
class DisclosureOptions:
    """Options for skolemization, canonicalization and selection.

    Attributes:
        urn_scheme: URN scheme used to skolemize blank nodes
            (``urn:<scheme>:<label>``).
        algorithm: Canonicalization algorithm name.
        max_work_factor: Bound on the canonicalizer's deep hashing work. Each
            blank node may be deep-hashed at most ``n ** max_work_factor``
            times, ``n`` being the number of blank nodes left without a
            unique first-degree hash. ``0`` disables deep hashing and
            ``math.inf`` removes the bound.
        max_deep_iterations: Explicit per-node deep hashing limit; overrides
            ``max_work_factor`` when set.
        reject_urdna2015: Refuse the ``URDNA2015`` alias of ``RDFC-1.0``.
        document_loader: Callable used to resolve remote ``@context`` URLs.
        signal: Event that, once set, aborts an ongoing canonicalization.
        max_workers: Thread pool size for evaluating group selections;
            ``1`` evaluates them sequentially.
    """

    urn_scheme: str = DEFAULT_URN_SCHEME
    algorithm: str = DEFAULT_ALGORITHM
    max_work_factor: float = DEFAULT_MAX_WORK_FACTOR
    max_deep_iterations: int | None = None
    reject_urdna2015: bool = False
    document_loader: DocumentLoader | None = None
    signal: threading.Event | None = None
    max_workers: int = 1

    def __post_init__(self):
        if not self.urn_scheme:
            raise ValueError("urn_scheme must be a non-empty string")
        if self.max_work_factor < 0:
            raise ValueError("max_work_factor must not be negative")
        if self.max_deep_iterations is not None and self.max_deep_iterations < 0:
            raise ValueError("max_deep_iterations must not be negative")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    def replace(self, **changes: Any) -> "DisclosureOptions":
        """Return a copy of these options with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def aborted(self) -> bool:
        """True once the caller has set the cancellation signal."""
        return self.signal is not None and self.signal.is_set()


def resolve_options(
    options: DisclosureOptions | None, urn_scheme: str | None = None
) -> DisclosureOptions:
    """Fill in defaults, letting an explicit ``urn_scheme`` win."""
    options = options or DisclosureOptions()
    if urn_scheme and urn_scheme != options.urn_scheme:
        options = options.replace(urn_scheme=urn_scheme)
    return options
