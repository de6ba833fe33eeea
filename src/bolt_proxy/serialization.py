"""
Conversion of Neo4j driver values into JSON-safe structures.

Every value the driver can hand back is classified into one ``ValueKind``
and converted by the matching handler. Graph entities are reduced to their
property maps: identity, labels and relationship type are intentionally
not part of the output.
"""
import datetime
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Dict, List, Union

from neo4j.graph import Entity, Path
from neo4j.spatial import Point
from neo4j.time import Date, DateTime, Duration, Time

# Largest integer a JavaScript/IEEE-754 double represents exactly.
MAX_SAFE_INTEGER = 2 ** 53 - 1
MIN_SAFE_INTEGER = -MAX_SAFE_INTEGER

SerializedValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

_NEO4J_TEMPORAL = (Date, DateTime, Time, Duration)
_STDLIB_TEMPORAL = (datetime.date, datetime.datetime, datetime.time, datetime.timedelta)


class ValueKind(str, Enum):
    """The finite set of value shapes produced by the driver."""
    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    SPATIAL = "spatial"
    ENTITY = "entity"
    PATH = "path"
    TEMPORAL = "temporal"
    BYTES = "bytes"
    LIST = "list"
    MAPPING = "mapping"
    OTHER = "other"


def classify(value: Any) -> ValueKind:
    # Order matters: bool is an int, Point is a tuple, Path and entities are iterable.
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, Point):
        return ValueKind.SPATIAL
    if isinstance(value, Entity):
        return ValueKind.ENTITY
    if isinstance(value, Path):
        return ValueKind.PATH
    if isinstance(value, _NEO4J_TEMPORAL) or isinstance(value, _STDLIB_TEMPORAL):
        return ValueKind.TEMPORAL
    if isinstance(value, (bytes, bytearray)):
        return ValueKind.BYTES
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OTHER


def is_safe_integer(value: int) -> bool:
    return MIN_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER


def _integer(value: int) -> Union[int, str]:
    # Never let a client-side double silently round a large integer.
    return value if is_safe_integer(value) else str(value)


def _passthrough(value: Any) -> Any:
    return value


def _list(value: Any) -> List[SerializedValue]:
    return [serialize(item) for item in value]


def _mapping(value: Mapping) -> Dict[str, SerializedValue]:
    return {str(key): serialize(item) for key, item in value.items()}


def _entity(value: Entity) -> Dict[str, SerializedValue]:
    return {str(key): serialize(item) for key, item in value.items()}


def _path(value: Path) -> Dict[str, SerializedValue]:
    nodes = value.nodes
    segments = [
        {
            "start": serialize(nodes[i]),
            "relationship": serialize(rel),
            "end": serialize(nodes[i + 1]),
        }
        for i, rel in enumerate(value.relationships)
    ]
    return {
        "start": serialize(value.start_node),
        "end": serialize(value.end_node),
        "segments": segments,
        "length": len(value.relationships),
    }


def _temporal(value: Any) -> str:
    if isinstance(value, _NEO4J_TEMPORAL):
        return value.iso_format()
    if isinstance(value, datetime.timedelta):
        return Duration(
            days=value.days, seconds=value.seconds, microseconds=value.microseconds
        ).iso_format()
    return value.isoformat()


def _spatial(value: Point) -> Dict[str, SerializedValue]:
    out: Dict[str, SerializedValue] = {"srid": value.srid}
    for axis, coordinate in zip(("x", "y", "z"), value):
        out[axis] = serialize(coordinate)
    return out


def _bytes(value: Union[bytes, bytearray]) -> List[int]:
    return list(value)


def _other(value: Any) -> SerializedValue:
    attrs = getattr(value, "__dict__", None)
    if isinstance(attrs, dict):
        return {k: serialize(v) for k, v in attrs.items() if not k.startswith("_")}
    return str(value)


_HANDLERS: Dict[ValueKind, Callable[[Any], SerializedValue]] = {
    ValueKind.NULL: _passthrough,
    ValueKind.BOOLEAN: _passthrough,
    ValueKind.INTEGER: _integer,
    ValueKind.FLOAT: _passthrough,
    ValueKind.STRING: _passthrough,
    ValueKind.SPATIAL: _spatial,
    ValueKind.ENTITY: _entity,
    ValueKind.PATH: _path,
    ValueKind.TEMPORAL: _temporal,
    ValueKind.BYTES: _bytes,
    ValueKind.LIST: _list,
    ValueKind.MAPPING: _mapping,
    ValueKind.OTHER: _other,
}


def serialize(value: Any) -> SerializedValue:
    """Converts a driver value into a JSON-safe value.

    Total over driver output: unknown shapes fall back to a public-attribute
    mapping or their string form. Serializing an already JSON-safe value
    returns an equal value.

    Args:
        value: Any value read from a result record.

    Returns:
        SerializedValue: None, bool, int, float, str, list or dict.
    """
    return _HANDLERS[classify(value)](value)
