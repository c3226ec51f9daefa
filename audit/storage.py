"""
Tagged structural types for values written to JSON storage.

Audit payloads must persist keyed structures as objects and purely
sequential ones as arrays. An empty diff or empty details payload has to be
stored as ``{}`` and never as ``[]``, so the shape is carried explicitly by
the type instead of being inferred from the runtime value at write time.
"""
from collections.abc import Mapping


class Document(dict):
    """A keyed structure persisted as a JSON object, even when empty."""

    kind = 'document'

    def __repr__(self):
        return f"Document({dict.__repr__(self)})"


class ValueList(list):
    """A sequential structure persisted as a JSON array."""

    kind = 'list'

    def __repr__(self):
        return f"ValueList({list.__repr__(self)})"


def _is_sequential_mapping(value):
    """True when a mapping is keyed exactly 0..n-1 in order."""
    keys = list(value.keys())
    if not all(isinstance(k, int) and not isinstance(k, bool) for k in keys):
        return False
    return keys == list(range(len(keys)))


def normalize_for_storage(value):
    """
    Recursively tag nested collections for storage.

    - Explicit ``Document``/``ValueList`` values keep their tag.
    - Empty mappings and empty sequences become an empty ``Document``.
    - Mappings keyed exactly ``0..n-1`` become a ``ValueList``.
    - Other mappings become a ``Document`` with string keys.
    - Lists and tuples become a ``ValueList``.
    - Scalars pass through unchanged.
    """
    if isinstance(value, Document):
        return Document((str(k), normalize_for_storage(v)) for k, v in value.items())

    if isinstance(value, ValueList):
        return ValueList(normalize_for_storage(v) for v in value)

    if isinstance(value, Mapping):
        if not value:
            return Document()
        if _is_sequential_mapping(value):
            return ValueList(normalize_for_storage(value[i]) for i in range(len(value)))
        return Document((str(k), normalize_for_storage(v)) for k, v in value.items())

    if isinstance(value, (list, tuple)):
        if not value:
            return Document()
        return ValueList(normalize_for_storage(v) for v in value)

    return value


def as_document(value):
    """
    Normalize a top-level payload that must always be stored as an object.

    ``None`` becomes an empty document; a sequential payload is re-keyed by
    position so the stored value is still an object.
    """
    if value is None:
        return Document()
    normalized = normalize_for_storage(value)
    if isinstance(normalized, Document):
        return normalized
    if isinstance(normalized, ValueList):
        return Document((str(i), v) for i, v in enumerate(normalized))
    return Document(value=normalized)
