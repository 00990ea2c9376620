"""A dynamically typed JSON value with comment support."""

from __future__ import annotations

import enum
import functools
from typing import Any, Iterator

MIN_INT = -(2**31)
MAX_INT = 2**31 - 1
MAX_UINT = 2**32 - 1


class ValueType(enum.IntEnum):
    """Kind of data held by a :class:`Value`; the order is used for sorting."""

    NULL = 0
    INT = 1
    UINT = 2
    REAL = 3
    STRING = 4
    BOOLEAN = 5
    ARRAY = 6
    OBJECT = 7


class CommentPlacement(enum.IntEnum):
    """Where a comment sits relative to its value."""

    BEFORE = 0
    AFTER_ON_SAME_LINE = 1
    AFTER = 2


_DEFAULTS = {
    ValueType.NULL: lambda: None,
    ValueType.INT: lambda: 0,
    ValueType.UINT: lambda: 0,
    ValueType.REAL: lambda: 0.0,
    ValueType.STRING: lambda: "",
    ValueType.BOOLEAN: lambda: False,
    ValueType.ARRAY: list,
    ValueType.OBJECT: dict,
}


def _copy_data(kind: ValueType, data: Any) -> Any:
    if kind is ValueType.ARRAY:
        return [Value(item) for item in data]
    if kind is ValueType.OBJECT:
        return {key: Value(item) for key, item in data.items()}
    return data


@functools.total_ordering
class Value:
    """A JSON value: null, integer, unsigned integer, real, string, boolean,
    array or object.

    Indexing with ``value[...]`` creates missing array elements and object
    members (turning a null value into an array or object on the way);
    use :meth:`get` and ``in`` for lookups that must not change the value.
    """

    __slots__ = ("_type", "_data", "_comments")
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, value: Any = None) -> None:
        self._comments: dict[CommentPlacement, str] = {}
        if isinstance(value, Value):
            self._type = value._type
            self._data = _copy_data(value._type, value._data)
            self._comments = dict(value._comments)
        elif isinstance(value, ValueType):
            self._type = value
            self._data = _DEFAULTS[value]()
        elif value is None:
            self._type, self._data = ValueType.NULL, None
        elif isinstance(value, bool):
            self._type, self._data = ValueType.BOOLEAN, value
        elif isinstance(value, int):
            if MIN_INT <= value <= MAX_INT:
                self._type = ValueType.INT
            elif MAX_INT < value <= MAX_UINT:
                self._type = ValueType.UINT
            else:
                raise OverflowError(f"integer {value} out of range")
            self._data = value
        elif isinstance(value, float):
            self._type, self._data = ValueType.REAL, value
        elif isinstance(value, str):
            self._type, self._data = ValueType.STRING, value
        else:
            raise TypeError(f"cannot build a Value from {type(value).__name__}")

    @classmethod
    def from_python(cls, obj: Any) -> "Value":
        """Build a value tree from plain Python data (dicts, lists, scalars)."""
        if isinstance(obj, Value):
            return cls(obj)
        if isinstance(obj, (list, tuple)):
            result = cls(ValueType.ARRAY)
            result._data = [cls.from_python(item) for item in obj]
            return result
        if isinstance(obj, dict):
            result = cls(ValueType.OBJECT)
            for key, item in obj.items():
                if not isinstance(key, str):
                    raise TypeError("object member names must be strings")
                result._data[key] = cls.from_python(item)
            return result
        return cls(obj)

    def to_python(self) -> Any:
        """Return the value as plain Python data."""
        if self._type is ValueType.ARRAY:
            return [item.to_python() for item in self._data]
        if self._type is ValueType.OBJECT:
            return {key: self._data[key].to_python() for key in sorted(self._data)}
        return self._data

    @property
    def type(self) -> ValueType:
        return self._type

    # -- conversions -------------------------------------------------------

    def as_string(self) -> str:
        if self._type is ValueType.NULL:
            return ""
        if self._type is ValueType.STRING:
            return self._data
        if self._type is ValueType.BOOLEAN:
            return "true" if self._data else "false"
        raise TypeError("Type is not convertible to string")

    def as_int(self) -> int:
        kind = self._type
        if kind is ValueType.NULL:
            return 0
        if kind is ValueType.INT:
            return self._data
        if kind is ValueType.UINT:
            if not self._data < MAX_INT:
                raise OverflowError("integer out of signed integer range")
            return self._data
        if kind is ValueType.REAL:
            if not MIN_INT <= self._data <= MAX_INT:
                raise OverflowError("Real out of signed integer range")
            return int(self._data)
        if kind is ValueType.BOOLEAN:
            return 1 if self._data else 0
        raise TypeError("Type is not convertible to int")

    def as_uint(self) -> int:
        kind = self._type
        if kind is ValueType.NULL:
            return 0
        if kind is ValueType.INT:
            if self._data < 0:
                raise OverflowError(
                    "Negative integer can not be converted to unsigned integer"
                )
            return self._data
        if kind is ValueType.UINT:
            return self._data
        if kind is ValueType.REAL:
            if not 0 <= self._data <= MAX_UINT:
                raise OverflowError("Real out of unsigned integer range")
            return int(self._data)
        if kind is ValueType.BOOLEAN:
            return 1 if self._data else 0
        raise TypeError("Type is not convertible to uint")

    def as_double(self) -> float:
        kind = self._type
        if kind is ValueType.NULL:
            return 0.0
        if kind in (ValueType.INT, ValueType.UINT, ValueType.REAL):
            return float(self._data)
        if kind is ValueType.BOOLEAN:
            return 1.0 if self._data else 0.0
        raise TypeError("Type is not convertible to double")

    def as_bool(self) -> bool:
        if self._type is ValueType.NULL:
            return False
        if self._type in (ValueType.ARRAY, ValueType.OBJECT):
            return len(self._data) != 0
        return bool(self._data)

    # -- type predicates ---------------------------------------------------

    def is_null(self) -> bool:
        return self._type is ValueType.NULL

    def is_bool(self) -> bool:
        return self._type is ValueType.BOOLEAN

    def is_int(self) -> bool:
        return self._type is ValueType.INT

    def is_uint(self) -> bool:
        return self._type is ValueType.UINT

    def is_integral(self) -> bool:
        return self._type in (ValueType.INT, ValueType.UINT, ValueType.BOOLEAN)

    def is_double(self) -> bool:
        return self._type is ValueType.REAL

    def is_numeric(self) -> bool:
        return self.is_integral() or self.is_double()

    def is_string(self) -> bool:
        return self._type is ValueType.STRING

    def is_array(self) -> bool:
        return self._type in (ValueType.NULL, ValueType.ARRAY)

    def is_object(self) -> bool:
        return self._type in (ValueType.NULL, ValueType.OBJECT)

    def is_convertible_to(self, other: ValueType) -> bool:
        kind, data = self._type, self._data
        scalar_targets = (ValueType.REAL, ValueType.STRING, ValueType.BOOLEAN)
        if kind is ValueType.NULL:
            return True
        if kind is ValueType.INT:
            return (
                (other is ValueType.NULL and data == 0)
                or other is ValueType.INT
                or (other is ValueType.UINT and data >= 0)
                or other in scalar_targets
            )
        if kind is ValueType.UINT:
            return (
                (other is ValueType.NULL and data == 0)
                or (other is ValueType.INT and data <= MAX_INT)
                or other is ValueType.UINT
                or other in scalar_targets
            )
        if kind is ValueType.REAL:
            return (
                (other is ValueType.NULL and data == 0.0)
                or (other is ValueType.INT and MIN_INT <= data <= MAX_INT)
                or (other is ValueType.UINT and 0 <= data <= MAX_UINT)
                or other in scalar_targets
            )
        if kind is ValueType.BOOLEAN:
            return (other is ValueType.NULL and not data) or other is not ValueType.NULL
        if kind is ValueType.STRING:
            return other is ValueType.STRING or (other is ValueType.NULL and not data)
        return other is kind or (other is ValueType.NULL and not data)

    # -- container behaviour -----------------------------------------------

    def __len__(self) -> int:
        if self._type in (ValueType.ARRAY, ValueType.OBJECT):
            return len(self._data)
        return 0

    def __bool__(self) -> bool:
        return not self.is_null()

    def empty(self) -> bool:
        """True for null, an empty array or an empty object."""
        if self._type in (ValueType.NULL, ValueType.ARRAY, ValueType.OBJECT):
            return len(self) == 0
        return False

    def clear(self) -> None:
        """Remove every element or member; the type is kept."""
        if self._type not in (ValueType.NULL, ValueType.ARRAY, ValueType.OBJECT):
            raise TypeError("clear() requires a null, array or object value")
        if self._type is not ValueType.NULL:
            self._data.clear()

    def resize(self, size: int) -> None:
        """Grow (with nulls) or truncate an array; a null value becomes an array."""
        self._require_array()
        if size < 0:
            raise ValueError("size must not be negative")
        if size < len(self._data):
            del self._data[size:]
        else:
            self._data.extend(Value() for _ in range(size - len(self._data)))

    def _require_array(self) -> None:
        if self._type is ValueType.NULL:
            self._type, self._data = ValueType.ARRAY, []
        elif self._type is not ValueType.ARRAY:
            raise TypeError("value is not an array")

    def _require_object(self) -> None:
        if self._type is ValueType.NULL:
            self._type, self._data = ValueType.OBJECT, {}
        elif self._type is not ValueType.OBJECT:
            raise TypeError("value is not an object")

    @staticmethod
    def _check_key(key: Any) -> None:
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            raise TypeError("key must be an array index or a member name")
        if isinstance(key, int) and key < 0:
            raise IndexError("array index must not be negative")

    def __getitem__(self, key: int | str) -> "Value":
        self._check_key(key)
        if isinstance(key, int):
            self._require_array()
            if key >= len(self._data):
                self._data.extend(Value() for _ in range(key + 1 - len(self._data)))
            return self._data[key]
        self._require_object()
        if key not in self._data:
            self._data[key] = Value()
        return self._data[key]

    def __setitem__(self, key: int | str, value: Any) -> None:
        source = value if isinstance(value, Value) else Value.from_python(value)
        self[key]._assign(source)

    def _assign(self, other: "Value") -> None:
        # The target keeps its own comments, as with plain assignment.
        self._type = other._type
        self._data = _copy_data(other._type, other._data)

    def get(self, key: int | str, default: Any = None) -> Any:
        """Return the element or member named by ``key``, or ``default``."""
        self._check_key(key)
        if self._type is ValueType.NULL:
            return default
        if isinstance(key, int):
            if self._type is not ValueType.ARRAY:
                raise TypeError("value is not an array")
            return self._data[key] if key < len(self._data) else default
        if self._type is not ValueType.OBJECT:
            raise TypeError("value is not an object")
        return self._data.get(key, default)

    def append(self, value: Any) -> "Value":
        """Add ``value`` at the end of the array and return the stored element."""
        self._require_array()
        index = len(self._data)
        self[index] = value
        return self._data[index]

    def remove_member(self, key: str) -> "Value":
        """Remove and return the named member, or a null value if absent."""
        if self._type is ValueType.NULL:
            return Value()
        if self._type is not ValueType.OBJECT:
            raise TypeError("value is not an object")
        return self._data.pop(key, Value())

    def __contains__(self, key: object) -> bool:
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            return False
        return self.get(key) is not None

    def member_names(self) -> list[str]:
        if self._type is ValueType.NULL:
            return []
        if self._type is not ValueType.OBJECT:
            raise TypeError("value is not an object")
        return sorted(self._data)

    # -- comments ------------------------------------------------------------

    def set_comment(self, comment: str, placement: CommentPlacement) -> None:
        if comment and not comment.startswith("/"):
            raise ValueError("Comments must start with /")
        self._comments[CommentPlacement(placement)] = comment

    def has_comment(self, placement: CommentPlacement) -> bool:
        return CommentPlacement(placement) in self._comments

    def get_comment(self, placement: CommentPlacement) -> str:
        return self._comments.get(CommentPlacement(placement), "")

    # -- iteration -------------------------------------------------------------

    def __iter__(self) -> Iterator["Value"]:
        """Yield array elements, or object members in name order."""
        for _, item in self.items():
            yield item

    def items(self) -> Iterator[tuple[int | str, "Value"]]:
        """Yield ``(index, element)`` or ``(name, member)`` pairs."""
        if self._type is ValueType.ARRAY:
            yield from enumerate(self._data)
        elif self._type is ValueType.OBJECT:
            for key in sorted(self._data):
                yield key, self._data[key]

    # -- comparison ------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._type is other._type and self._data == other._data

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self._type is not other._type:
            return self._type < other._type
        if self._type is ValueType.NULL:
            return False
        if self._type in (ValueType.ARRAY, ValueType.OBJECT):
            if len(self) != len(other):
                return len(self) < len(other)
            return list(self.items()) < list(other.items())
        return self._data < other._data

    def __repr__(self) -> str:
        return f"Value({self.to_python()!r})"