"""Parsing JSON text (with optional comments) into :class:`~queqiao.value.Value` trees."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import IO, Optional, Union

from queqiao.value import MAX_UINT, MIN_INT, CommentPlacement, Value, ValueType

_END = "\0"
_DIGITS = "0123456789"
_HEX_DIGITS = "0123456789abcdefABCDEF"
_NUMBER_CHARS = _DIGITS + ".eE+-"
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_SIMPLE_ESCAPES = {
    '"': '"',
    "/": "/",
    "\\": "\\",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


class JsonParseError(ValueError):
    """Raised when a document cannot be parsed; the message lists every error."""


class _TokenType(enum.Enum):
    END_OF_STREAM = enum.auto()
    OBJECT_BEGIN = enum.auto()
    OBJECT_END = enum.auto()
    ARRAY_BEGIN = enum.auto()
    ARRAY_END = enum.auto()
    STRING = enum.auto()
    NUMBER = enum.auto()
    TRUE = enum.auto()
    FALSE = enum.auto()
    NULL = enum.auto()
    ARRAY_SEPARATOR = enum.auto()
    MEMBER_SEPARATOR = enum.auto()
    COMMENT = enum.auto()
    ERROR = enum.auto()


_PUNCTUATION = {
    "{": _TokenType.OBJECT_BEGIN,
    "}": _TokenType.OBJECT_END,
    "[": _TokenType.ARRAY_BEGIN,
    "]": _TokenType.ARRAY_END,
    ",": _TokenType.ARRAY_SEPARATOR,
    ":": _TokenType.MEMBER_SEPARATOR,
    _END: _TokenType.END_OF_STREAM,
}

_LITERALS = {
    "t": (_TokenType.TRUE, "rue"),
    "f": (_TokenType.FALSE, "alse"),
    "n": (_TokenType.NULL, "ull"),
}


@dataclass
class _Token:
    type: _TokenType = _TokenType.ERROR
    start: int = 0
    end: int = 0


@dataclass
class _ErrorInfo:
    token: _Token
    message: str
    extra: Optional[int] = None


@dataclass(frozen=True)
class Features:
    """Which extensions to strict JSON the reader accepts."""

    allow_comments: bool = True
    strict_root: bool = False

    @classmethod
    def all(cls) -> "Features":
        """Comments allowed, any value accepted as the root."""
        return cls()

    @classmethod
    def strict_mode(cls) -> "Features":
        """No comments, and the root must be an array or an object."""
        return cls(allow_comments=False, strict_root=True)


class Reader:
    """Parses JSON documents into value trees, optionally keeping comments."""

    def __init__(self, features: Optional[Features] = None) -> None:
        self._features = features if features is not None else Features.all()
        self._reset("", False)

    def _reset(self, document: str, collect_comments: bool) -> None:
        self._doc = document
        self._pos = 0
        self._end = len(document)
        self._collect = collect_comments
        self._last_value_end: Optional[int] = None
        self._last_value: Optional[Value] = None
        self._comments_before = ""
        self._errors: list[_ErrorInfo] = []
        self._nodes: list[tuple[Value, Union[int, str]]] = []

    # -- public interface ------------------------------------------------

    def parse(
        self, document: Union[str, bytes, IO], collect_comments: bool = True
    ) -> Value:
        """Parse ``document`` (text, bytes or a readable stream) and return its root.

        Raises :class:`JsonParseError` if the document is not valid.
        """
        text = document.read() if hasattr(document, "read") else document
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        if not self._features.allow_comments:
            collect_comments = False
        self._reset(text, collect_comments)

        holder = Value(ValueType.ARRAY)
        holder.resize(1)
        self._nodes.append((holder, 0))
        successful = self._read_value()
        self._skip_comment_tokens()
        root = holder[0]
        if self._collect and self._comments_before:
            root.set_comment(self._comments_before, CommentPlacement.AFTER)
        if self._features.strict_root and not (root.is_array() or root.is_object()):
            token = _Token(_TokenType.ERROR, 0, self._end)
            self._add_error(
                "A valid JSON document must be either an array or an object value.",
                token,
            )
            successful = False
        if not successful:
            raise JsonParseError(self.formatted_error_messages())
        return root

    def formatted_error_messages(self) -> str:
        """Describe every error of the last parse, with line and column."""
        parts = []
        for error in self._errors:
            parts.append(f"* {self._location(error.token.start)}\n")
            parts.append(f"  {error.message}\n")
            if error.extra is not None:
                parts.append(f"See {self._location(error.extra)} for detail.\n")
        return "".join(parts)

    # -- tree helpers ------------------------------------------------------

    def _current(self) -> Value:
        container, key = self._nodes[-1]
        return container[key]

    def _set_current(self, value: Value) -> None:
        container, key = self._nodes[-1]
        container[key] = value

    # -- values ---------------------------------------------------------------

    def _read_value(self) -> bool:
        token = self._skip_comment_tokens()
        if self._collect and self._comments_before:
            self._current().set_comment(self._comments_before, CommentPlacement.BEFORE)
            self._comments_before = ""

        kind = token.type
        successful = True
        if kind is _TokenType.OBJECT_BEGIN:
            successful = self._read_object()
        elif kind is _TokenType.ARRAY_BEGIN:
            successful = self._read_array()
        elif kind is _TokenType.NUMBER:
            successful = self._decode_number(token)
        elif kind is _TokenType.STRING:
            decoded = self._decode_string(token)
            if decoded is None:
                successful = False
            else:
                self._set_current(Value(decoded))
        elif kind is _TokenType.TRUE:
            self._set_current(Value(True))
        elif kind is _TokenType.FALSE:
            self._set_current(Value(False))
        elif kind is _TokenType.NULL:
            self._set_current(Value())
        else:
            return self._add_error("Syntax error: value, object or array expected.", token)

        if self._collect:
            self._last_value_end = self._pos
            self._last_value = self._current()
        return successful

    def _read_object(self) -> bool:
        self._set_current(Value(ValueType.OBJECT))
        name = ""
        while True:
            token_name = self._read_token()
            while token_name.type is _TokenType.COMMENT:
                token_name = self._read_token()
            if token_name.type is _TokenType.OBJECT_END and not name:
                return True
            if token_name.type is not _TokenType.STRING:
                break
            decoded = self._decode_string(token_name)
            if decoded is None:
                return self._recover_from_error(_TokenType.OBJECT_END)
            name = decoded

            colon = self._read_token()
            if colon.type is not _TokenType.MEMBER_SEPARATOR:
                return self._add_error_and_recover(
                    "Missing ':' after object member name", colon, _TokenType.OBJECT_END
                )
            current = self._current()
            current[name]
            self._nodes.append((current, name))
            ok = self._read_value()
            self._nodes.pop()
            if not ok:
                return self._recover_from_error(_TokenType.OBJECT_END)

            comma = self._read_token()
            if comma.type not in (
                _TokenType.OBJECT_END,
                _TokenType.ARRAY_SEPARATOR,
                _TokenType.COMMENT,
            ):
                return self._add_error_and_recover(
                    "Missing ',' or '}' in object declaration",
                    comma,
                    _TokenType.OBJECT_END,
                )
            while comma.type is _TokenType.COMMENT:
                comma = self._read_token()
            if comma.type is _TokenType.OBJECT_END:
                return True
        return self._add_error_and_recover(
            "Missing '}' or object member name", token_name, _TokenType.OBJECT_END
        )

    def _read_array(self) -> bool:
        self._set_current(Value(ValueType.ARRAY))
        self._skip_spaces()
        if self._pos < self._end and self._doc[self._pos] == "]":
            self._read_token()
            return True
        index = 0
        while True:
            current = self._current()
            current[index]
            self._nodes.append((current, index))
            index += 1
            ok = self._read_value()
            self._nodes.pop()
            if not ok:
                return self._recover_from_error(_TokenType.ARRAY_END)
            token = self._read_token()
            while token.type is _TokenType.COMMENT:
                token = self._read_token()
            if token.type is _TokenType.ARRAY_END:
                return True

    def _decode_number(self, token: _Token) -> bool:
        text = self._doc[token.start : token.end]
        is_double = any(c in ".eE+" for c in text) or "-" in text[1:]
        if is_double:
            return self._decode_double(token)
        negative = text.startswith("-")
        digits = text[1:] if negative else text
        threshold = (-MIN_INT if negative else MAX_UINT) // 10
        value = 0
        for char in digits:
            if char not in _DIGITS:
                return self._add_error(f"'{text}' is not a number.", token)
            if value >= threshold:
                return self._decode_double(token)
            value = value * 10 + int(char)
        self._set_current(Value(-value if negative else value))
        return True

    def _decode_double(self, token: _Token) -> bool:
        text = self._doc[token.start : token.end]
        match = _FLOAT_PREFIX.match(text)
        if match is None:
            return self._add_error(f"'{text}' is not a number.", token)
        self._set_current(Value(float(match.group())))
        return True

    def _decode_string(self, token: _Token) -> Optional[str]:
        doc = self._doc
        pos, end = token.start + 1, token.end - 1
        out: list[str] = []
        while pos < end:
            char = doc[pos]
            pos += 1
            if char == '"':
                break
            if char != "\\":
                out.append(char)
                continue
            if pos == end:
                self._add_error("Empty escape sequence in string", token, pos)
                return None
            escape = doc[pos]
            pos += 1
            if escape in _SIMPLE_ESCAPES:
                out.append(_SIMPLE_ESCAPES[escape])
            elif escape == "u":
                code_point, pos = self._decode_code_point(token, pos, end)
                if code_point is None:
                    return None
                out.append(chr(code_point))
            else:
                self._add_error("Bad escape sequence in string", token, pos)
                return None
        return "".join(out)

    def _decode_code_point(
        self, token: _Token, pos: int, end: int
    ) -> tuple[Optional[int], int]:
        code_point, pos = self._decode_unicode_escape(token, pos, end)
        if code_point is None or not 0xD800 <= code_point <= 0xDBFF:
            return code_point, pos
        if end - pos < 6:
            self._add_error(
                "additional six characters expected to parse unicode surrogate pair.",
                token,
                pos,
            )
            return None, pos
        first = self._doc[pos]
        pos += 1
        introduced = False
        if first == "\\":
            second = self._doc[pos]
            pos += 1
            introduced = second == "u"
        if not introduced:
            self._add_error(
                "expecting another \\u token to begin the second half of a "
                "unicode surrogate pair",
                token,
                pos,
            )
            return None, pos
        low, pos = self._decode_unicode_escape(token, pos, end)
        if low is None:
            return None, pos
        return 0x10000 + ((code_point & 0x3FF) << 10) + (low & 0x3FF), pos

    def _decode_unicode_escape(
        self, token: _Token, pos: int, end: int
    ) -> tuple[Optional[int], int]:
        if end - pos < 4:
            self._add_error(
                "Bad unicode escape sequence in string: four digits expected.",
                token,
                pos,
            )
            return None, pos
        value = 0
        for char in self._doc[pos : pos + 4]:
            pos += 1
            if char not in _HEX_DIGITS:
                self._add_error(
                    "Bad unicode escape sequence in string: hexadecimal digit expected.",
                    token,
                    pos,
                )
                return None, pos
            value = value * 16 + int(char, 16)
        return value, pos

    # -- tokens ---------------------------------------------------------------

    def _skip_comment_tokens(self) -> _Token:
        token = self._read_token()
        if self._features.allow_comments:
            while token.type is _TokenType.COMMENT:
                token = self._read_token()
        return token

    def _read_token(self) -> _Token:
        self._skip_spaces()
        token = _Token(start=self._pos)
        char = self._next_char()
        ok = True
        if char in _PUNCTUATION:
            token.type = _PUNCTUATION[char]
        elif char == '"':
            token.type = _TokenType.STRING
            ok = self._read_string()
        elif char == "/":
            token.type = _TokenType.COMMENT
            ok = self._read_comment()
        elif char in _DIGITS or char == "-":
            token.type = _TokenType.NUMBER
            self._read_number()
        elif char in _LITERALS:
            token.type, rest = _LITERALS[char]
            ok = self._match(rest)
        else:
            ok = False
        if not ok:
            token.type = _TokenType.ERROR
        token.end = self._pos
        return token

    def _next_char(self) -> str:
        if self._pos == self._end:
            return _END
        char = self._doc[self._pos]
        self._pos += 1
        return char

    def _skip_spaces(self) -> None:
        while self._pos < self._end and self._doc[self._pos] in " \t\r\n":
            self._pos += 1

    def _match(self, pattern: str) -> bool:
        if not self._doc.startswith(pattern, self._pos):
            return False
        self._pos += len(pattern)
        return True

    def _read_number(self) -> None:
        while self._pos < self._end and self._doc[self._pos] in _NUMBER_CHARS:
            self._pos += 1

    def _read_string(self) -> bool:
        char = _END
        while self._pos != self._end:
            char = self._next_char()
            if char == "\\":
                self._next_char()
            elif char == '"':
                break
        return char == '"'

    def _read_comment(self) -> bool:
        begin = self._pos - 1
        kind = self._next_char()
        if kind == "*":
            successful = self._read_c_style_comment()
        elif kind == "/":
            successful = self._read_cpp_style_comment()
        else:
            successful = False
        if not successful:
            return False
        if self._collect:
            placement = CommentPlacement.BEFORE
            if self._last_value_end is not None and not _has_newline(
                self._doc[self._last_value_end : begin]
            ):
                if kind != "*" or not _has_newline(self._doc[begin : self._pos]):
                    placement = CommentPlacement.AFTER_ON_SAME_LINE
            self._add_comment(self._doc[begin : self._pos], placement)
        return True

    def _add_comment(self, text: str, placement: CommentPlacement) -> None:
        if placement is CommentPlacement.AFTER_ON_SAME_LINE and self._last_value is not None:
            self._last_value.set_comment(text, placement)
        else:
            if self._comments_before:
                self._comments_before += "\n"
            self._comments_before += text

    def _read_c_style_comment(self) -> bool:
        while self._pos != self._end:
            char = self._next_char()
            if char == "*" and self._pos < self._end and self._doc[self._pos] == "/":
                break
        return self._next_char() == "/"

    def _read_cpp_style_comment(self) -> bool:
        while self._pos != self._end:
            if self._next_char() in "\r\n":
                break
        return True

    # -- errors ---------------------------------------------------------------

    def _add_error(self, message: str, token: _Token, extra: Optional[int] = None) -> bool:
        self._errors.append(_ErrorInfo(token, message, extra))
        return False

    def _recover_from_error(self, skip_until: _TokenType) -> bool:
        while True:
            token = self._read_token()
            if token.type in (skip_until, _TokenType.END_OF_STREAM):
                return False

    def _add_error_and_recover(
        self, message: str, token: _Token, skip_until: _TokenType
    ) -> bool:
        self._add_error(message, token)
        return self._recover_from_error(skip_until)

    def _location(self, location: int) -> str:
        doc, end = self._doc, self._end
        pos, line, line_start = 0, 0, 0
        while pos < location and pos != end:
            char = doc[pos]
            pos += 1
            if char == "\r":
                if pos < end and doc[pos] == "\n":
                    pos += 1
                line_start = pos
                line += 1
            elif char == "\n":
                line_start = pos
                line += 1
        return f"Line {line + 1}, Column {location - line_start + 1}"


def _has_newline(text: str) -> bool:
    return "\n" in text or "\r" in text


def parse(document: Union[str, bytes, IO]) -> Value:
    """Parse ``document`` keeping its comments; raise :class:`JsonParseError` on failure."""
    return Reader().parse(document, True)