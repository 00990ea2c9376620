"""Serialising :class:`~queqiao.value.Value` trees as JSON text."""

from __future__ import annotations

import abc
from typing import IO, Optional

from queqiao.value import CommentPlacement, Value, ValueType

_DIGITS = "0123456789"
_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
_RIGHT_MARGIN = 74


def _double_to_string(value: float) -> str:
    text = "%#.16g" % value
    if not text.endswith("0"):
        return text
    last_nonzero = max(len(text.rstrip("0")) - 1, 0)
    pos = last_nonzero
    while pos >= 0 and text[pos] in _DIGITS:
        pos -= 1
    if pos >= 0 and text[pos] == ".":
        # Drop the trailing zeroes but keep one.
        return text[: last_nonzero + 2]
    return text


def value_to_string(value: bool | int | float) -> str:
    """Render a boolean, an integer or a real number as JSON text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _double_to_string(value)
    raise TypeError(f"cannot render {type(value).__name__} as a JSON scalar")


def _escape(char: str) -> str:
    if char in _ESCAPES:
        return _ESCAPES[char]
    if "\x01" <= char <= "\x1f":
        return "\\u%04X" % ord(char)
    return char


def value_to_quoted_string(value: str) -> str:
    """Quote ``value`` as a JSON string, escaping special and control characters.

    The text ends at the first NUL character, if any.
    """
    value = value.split("\0", 1)[0]
    return '"' + "".join(_escape(char) for char in value) + '"'


def _scalar_text(value: Value) -> Optional[str]:
    kind = value.type
    if kind is ValueType.NULL:
        return "null"
    if kind is ValueType.INT:
        return value_to_string(value.as_int())
    if kind is ValueType.UINT:
        return value_to_string(value.as_uint())
    if kind is ValueType.REAL:
        return value_to_string(value.as_double())
    if kind is ValueType.STRING:
        return value_to_quoted_string(value.as_string())
    if kind is ValueType.BOOLEAN:
        return value_to_string(value.as_bool())
    return None


def _normalize_eol(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


class FastWriter:
    """Writes a value on a single line, without comments or indentation."""

    def __init__(self) -> None:
        self._yaml_compatible = False

    def enable_yaml_compatibility(self) -> None:
        """Put a space after the colon of each object member."""
        self._yaml_compatible = True

    def write(self, root: Value) -> str:
        parts: list[str] = []
        self._write_value(root, parts)
        parts.append("\n")
        return "".join(parts)

    def _write_value(self, value: Value, parts: list[str]) -> None:
        text = _scalar_text(value)
        if text is not None:
            parts.append(text)
        elif value.type is ValueType.ARRAY:
            parts.append("[")
            for index, child in value.items():
                if index > 0:
                    parts.append(",")
                self._write_value(child, parts)
            parts.append("]")
        else:
            separator = ": " if self._yaml_compatible else ":"
            parts.append("{")
            for position, (name, child) in enumerate(value.items()):
                if position > 0:
                    parts.append(",")
                parts.append(value_to_quoted_string(name))
                parts.append(separator)
                self._write_value(child, parts)
            parts.append("}")


class _StyledFormatter(abc.ABC):
    """Shared layout rules of the human-friendly writers."""

    def __init__(self, indentation: str) -> None:
        self._indentation = indentation
        self._child_values: list[str] = []
        self._add_child_values = False
        self._indent_string = ""

    @abc.abstractmethod
    def _emit(self, text: str) -> None:
        """Append ``text`` to the output."""

    @abc.abstractmethod
    def _write_indent(self) -> None:
        """Start a new indented line."""

    def _start(self) -> None:
        self._child_values = []
        self._add_child_values = False
        self._indent_string = ""

    def _write_root(self, root: Value) -> None:
        self._write_comment_before_value(root)
        self._write_value(root)
        self._write_comment_after_value_on_same_line(root)
        self._emit("\n")

    def _write_value(self, value: Value) -> None:
        text = _scalar_text(value)
        if text is not None:
            self._push_value(text)
            return
        if value.type is ValueType.ARRAY:
            self._write_array_value(value)
            return
        names = value.member_names()
        if not names:
            self._push_value("{}")
            return
        self._write_with_indent("{")
        self._indent()
        last = len(names) - 1
        for position, name in enumerate(names):
            child = value.get(name)
            self._write_comment_before_value(child)
            self._write_with_indent(value_to_quoted_string(name))
            self._emit(" : ")
            self._write_value(child)
            if position < last:
                self._emit(",")
            self._write_comment_after_value_on_same_line(child)
        self._unindent()
        self._write_with_indent("}")

    def _write_array_value(self, value: Value) -> None:
        size = len(value)
        if size == 0:
            self._push_value("[]")
        elif self._is_multiline_array(value):
            self._write_with_indent("[")
            self._indent()
            child_texts = list(self._child_values)
            for index, child in value.items():
                self._write_comment_before_value(child)
                if child_texts:
                    self._write_with_indent(child_texts[index])
                else:
                    self._write_indent()
                    self._write_value(child)
                if index < size - 1:
                    self._emit(",")
                self._write_comment_after_value_on_same_line(child)
            self._unindent()
            self._write_with_indent("]")
        else:
            self._emit("[ " + ", ".join(self._child_values) + " ]")

    def _is_multiline_array(self, value: Value) -> bool:
        size = len(value)
        multiline = size * 3 >= _RIGHT_MARGIN
        self._child_values = []
        if not multiline:
            multiline = any(
                (child.is_array() or child.is_object()) and len(child) > 0
                for child in value
            )
        if not multiline:
            self._add_child_values = True
            for child in value:
                self._write_value(child)
            self._add_child_values = False
            line_length = 4 + (size - 1) * 2 + sum(len(t) for t in self._child_values)
            multiline = line_length >= _RIGHT_MARGIN
        return multiline

    def _push_value(self, text: str) -> None:
        if self._add_child_values:
            self._child_values.append(text)
        else:
            self._emit(text)

    def _write_with_indent(self, text: str) -> None:
        self._write_indent()
        self._emit(text)

    def _indent(self) -> None:
        self._indent_string += self._indentation

    def _unindent(self) -> None:
        if len(self._indent_string) < len(self._indentation):
            raise RuntimeError("unbalanced indentation")
        self._indent_string = self._indent_string[: -len(self._indentation) or None]

    def _write_comment_before_value(self, value: Value) -> None:
        if value.has_comment(CommentPlacement.BEFORE):
            self._emit(_normalize_eol(value.get_comment(CommentPlacement.BEFORE)) + "\n")

    def _write_comment_after_value_on_same_line(self, value: Value) -> None:
        if value.has_comment(CommentPlacement.AFTER_ON_SAME_LINE):
            comment = value.get_comment(CommentPlacement.AFTER_ON_SAME_LINE)
            self._emit(" " + _normalize_eol(comment))
        if value.has_comment(CommentPlacement.AFTER):
            comment = value.get_comment(CommentPlacement.AFTER)
            self._emit("\n" + _normalize_eol(comment) + "\n")


class StyledWriter(_StyledFormatter):
    """Writes an indented, human-friendly document into a string, with comments."""

    def __init__(self) -> None:
        super().__init__(" " * 3)
        self._document = ""

    def write(self, root: Value) -> str:
        self._start()
        self._document = ""
        self._write_root(root)
        return self._document

    def _emit(self, text: str) -> None:
        self._document += text

    def _write_indent(self) -> None:
        if self._document:
            last = self._document[-1]
            if last == " ":
                return
            if last != "\n":
                self._document += "\n"
        self._document += self._indent_string


class StyledStreamWriter(_StyledFormatter):
    """Writes an indented, human-friendly document to a text stream."""

    def __init__(self, indentation: str = "\t") -> None:
        super().__init__(indentation)
        self._out: Optional[IO[str]] = None

    def write(self, out: IO[str], root: Value) -> None:
        self._start()
        self._out = out
        try:
            self._write_root(root)
        finally:
            self._out = None

    def _emit(self, text: str) -> None:
        if self._out is None:
            raise RuntimeError("no output stream")
        self._out.write(text)

    def _write_indent(self) -> None:
        self._emit("\n" + self._indent_string)


def to_styled_string(value: Value) -> str:
    """Return ``value`` as an indented document."""
    return StyledWriter().write(value)