"""Classification and copying of parsed JSON values.

The selector branches on a value's ``JsonKind`` rather than on ad hoc type
tests. ``structurally_equal`` exists for verification and tests; the
algorithms themselves never compare documents.
"""

import copy
from enum import Enum
from typing import Any

JsonValue = None | bool | int | float | str | list | dict


class JsonKind(Enum):
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


SCALAR_KINDS = frozenset(
    {JsonKind.NULL, JsonKind.BOOL, JsonKind.NUMBER, JsonKind.STRING}
)


def json_kind(value: Any) -> JsonKind:
    """Return the JSON kind of ``value``.

    Raises:
        TypeError: If ``value`` is not something ``json.loads`` could produce.
    """
    match value:
        case None:
            return JsonKind.NULL
        # bool before int: True is an int in Python
        case bool():
            return JsonKind.BOOL
        case int() | float():
            return JsonKind.NUMBER
        case str():
            return JsonKind.STRING
        case list() | tuple():
            return JsonKind.ARRAY
        case dict():
            return JsonKind.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def is_scalar(value: Any) -> bool:
    return json_kind(value) in SCALAR_KINDS


def deep_copy(value: JsonValue) -> JsonValue:
    return copy.deepcopy(value)


def structurally_equal(a: Any, b: Any) -> bool:
    """Compare two JSON values structurally.

    Arrays are compared as ordered sequences, objects as unordered key/value
    sets. Booleans never equal numbers, and ``1`` equals ``1.0``.
    """
    kind = json_kind(a)
    if kind is not json_kind(b):
        return False
    match kind:
        case JsonKind.ARRAY:
            return len(a) == len(b) and all(
                structurally_equal(x, y) for x, y in zip(a, b)
            )
        case JsonKind.OBJECT:
            return a.keys() == b.keys() and all(
                structurally_equal(a[key], b[key]) for key in a
            )
        case _:
            return a == b
