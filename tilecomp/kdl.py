"""A parser for KDL documents, the format of the configuration file."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from typing import Any

_NON_IDENTIFIER = set('\\/(){}<>;[]=,"')
_NEWLINES = set("\r\n\x85\x0c\u2028\u2029")
_WHITESPACE = set(
    "\t \u00a0\u1680"
    + "".join(chr(c) for c in range(0x2000, 0x200B))
    + "\u202f\u205f\u3000\ufeff"
)
_KEYWORDS: dict[str, Any] = {"true": True, "false": False, "null": None}
_ESCAPES = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "/": "/",
    '"': '"',
    "b": "\b",
    "f": "\f",
}

_HEX = re.compile(r"[+-]?0x[0-9a-fA-F][0-9a-fA-F_]*")
_OCTAL = re.compile(r"[+-]?0o[0-7][0-7_]*")
_BINARY = re.compile(r"[+-]?0b[01][01_]*")
_DECIMAL = re.compile(
    r"[+-]?[0-9][0-9_]*(?P<fraction>\.[0-9][0-9_]*)?(?P<exponent>[eE][+-]?[0-9][0-9_]*)?"
)
_RAW_STRING_START = re.compile(r'r#*"')


class KdlError(ValueError):
    """Raised for a malformed document or a misplaced node."""

    def __init__(
        self,
        message: str,
        filename: str = "",
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename
        self.line = line
        self.column = column

    def __str__(self) -> str:
        location = self.filename
        if self.line is not None:
            location = f"{location}:{self.line}"
            if self.column is not None:
                location = f"{location}:{self.column}"
        return f"{location}: {self.message}" if location else self.message


@dataclass
class KdlNode:
    """A node: its name, positional arguments, properties and child nodes."""

    name: str
    arguments: list[Any] = field(default_factory=list)
    properties: dict[str, Any] = field(default_factory=dict)
    children: list[KdlNode] = field(default_factory=list)
    line: int = field(default=0, compare=False)
    filename: str = field(default="", compare=False, repr=False)

    def child(self, name: str) -> KdlNode | None:
        """The only child called ``name``, or None; duplicates are an error."""
        matches = self.children_named(name)
        if len(matches) > 1:
            raise KdlError(
                f"duplicate node `{name}`, single node expected",
                self.filename,
                matches[1].line,
            )
        return matches[0] if matches else None

    def children_named(self, name: str) -> list[KdlNode]:
        """All children called ``name``, in document order."""
        return [node for node in self.children if node.name == name]


def _is_number_token(token: str) -> bool:
    if token[0].isdigit():
        return True
    return token[0] in "+-" and len(token) > 1 and token[1].isdigit()


class _Parser:
    def __init__(self, text: str, filename: str) -> None:
        self.text = text
        self.filename = filename
        self.pos = 0
        self._line_starts = [0] + [
            index + 1 for index, char in enumerate(text) if char == "\n"
        ]

    # -- positions and errors ---------------------------------------------

    def _line_col(self, pos: int) -> tuple[int, int]:
        line = bisect.bisect_right(self._line_starts, pos)
        return line, pos - self._line_starts[line - 1] + 1

    def error(self, message: str, pos: int | None = None) -> KdlError:
        line, column = self._line_col(self.pos if pos is None else pos)
        return KdlError(message, self.filename, line, column)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def at(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos)

    # -- whitespace and comments ------------------------------------------

    def _skip_newline(self) -> None:
        if self.at("\r\n"):
            self.pos += 2
        else:
            self.pos += 1

    def _skip_line_comment(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos] not in _NEWLINES:
            self.pos += 1

    def _skip_block_comment(self) -> None:
        start = self.pos
        self.pos += 2
        depth = 1
        while depth:
            if self.pos >= len(self.text):
                raise self.error("unterminated block comment", start)
            if self.at("/*"):
                depth += 1
                self.pos += 2
            elif self.at("*/"):
                depth -= 1
                self.pos += 2
            else:
                self.pos += 1

    def _skip_whitespace(self) -> bool:
        start = self.pos
        while True:
            if self.peek() in _WHITESPACE and self.peek():
                self.pos += 1
            elif self.at("/*"):
                self._skip_block_comment()
            else:
                return self.pos != start

    def _skip_node_space(self) -> bool:
        start = self.pos
        while True:
            self._skip_whitespace()
            if self.peek() != "\\":
                return self.pos != start
            escape = self.pos
            self.pos += 1
            self._skip_whitespace()
            if self.at("//"):
                self._skip_line_comment()
            if self.peek() in _NEWLINES and self.peek():
                self._skip_newline()
            elif self.pos < len(self.text):
                raise self.error("expected a newline after line continuation", escape)

    def _skip_line_space(self) -> None:
        while True:
            self._skip_whitespace()
            char = self.peek()
            if char and char in _NEWLINES:
                self._skip_newline()
            elif self.at("//"):
                self._skip_line_comment()
            else:
                return

    # -- nodes ------------------------------------------------------------

    def parse_nodes(self, nested: bool) -> list[KdlNode]:
        nodes: list[KdlNode] = []
        while True:
            self._skip_line_space()
            if self.pos >= len(self.text):
                if nested:
                    raise self.error("unclosed children block, expected '}'")
                return nodes
            if self.peek() == "}":
                if nested:
                    return nodes
                raise self.error("unexpected '}'")
            if self.at("/-"):
                self.pos += 2
                self._skip_line_space()
                self._parse_node()
                continue
            nodes.append(self._parse_node())

    def _parse_node(self) -> KdlNode:
        start = self.pos
        if self.peek() == "(":
            self._parse_annotation()
        name = self._parse_name()
        line, _ = self._line_col(start)
        node = KdlNode(name, line=line, filename=self.filename)

        while True:
            had_space = self._skip_node_space()
            if self._at_terminator():
                self._consume_terminator()
                return node
            if self.peek() == "{":
                node.children = self._parse_children()
                self._skip_node_space()
                if not self._at_terminator():
                    raise self.error("expected end of node after children block")
                self._consume_terminator()
                return node
            if not had_space:
                raise self.error("expected whitespace before node entry")
            if self.at("/-"):
                self.pos += 2
                self._skip_node_space()
                if self.peek() == "{":
                    self._parse_children()
                else:
                    self._parse_entry()
                continue
            key, value = self._parse_entry()
            if key is None:
                node.arguments.append(value)
            else:
                node.properties[key] = value

    def _at_terminator(self) -> bool:
        char = self.peek()
        return (
            char == ""
            or char in _NEWLINES
            or char in ";}"
            or self.at("//")
        )

    def _consume_terminator(self) -> None:
        char = self.peek()
        if char == ";":
            self.pos += 1
        elif char and char in _NEWLINES:
            self._skip_newline()
        elif self.at("//"):
            self._skip_line_comment()

    def _parse_children(self) -> list[KdlNode]:
        self.pos += 1
        children = self.parse_nodes(nested=True)
        self.pos += 1
        return children

    def _parse_name(self) -> str:
        if self._at_string():
            return self._parse_string()
        start = self.pos
        token = self._read_bare()
        if _is_number_token(token):
            raise self.error("node name cannot be a number", start)
        if token in _KEYWORDS:
            raise self.error(f"node name cannot be the keyword `{token}`", start)
        return token

    def _parse_annotation(self) -> str:
        self.pos += 1
        name = self._parse_name()
        if self.peek() != ")":
            raise self.error("expected ')' to close type annotation")
        self.pos += 1
        return name

    # -- entries and values -----------------------------------------------

    def _parse_entry(self) -> tuple[str | None, Any]:
        if self.peek() == "(":
            self._parse_annotation()
            return None, self._parse_value()
        if self._at_string():
            text = self._parse_string()
            if self.peek() == "=":
                self.pos += 1
                return text, self._parse_value()
            return None, text
        start = self.pos
        token = self._read_bare()
        if self.peek() == "=":
            if _is_number_token(token) or token in _KEYWORDS:
                raise self.error(f"invalid property name `{token}`", start)
            self.pos += 1
            return token, self._parse_value()
        return None, self._bare_value(token, start)

    def _parse_value(self) -> Any:
        if self.peek() == "(":
            self._parse_annotation()
        if self._at_string():
            return self._parse_string()
        start = self.pos
        return self._bare_value(self._read_bare(), start)

    def _read_bare(self) -> str:
        start = self.pos
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char in _NON_IDENTIFIER or char in _WHITESPACE or char in _NEWLINES:
                break
            self.pos += 1
        if self.pos == start:
            char = self.peek()
            raise self.error(
                f"unexpected character {char!r}" if char else "unexpected end of input"
            )
        return text[start : self.pos]

    def _bare_value(self, token: str, start: int) -> Any:
        if token in _KEYWORDS:
            return _KEYWORDS[token]
        if _is_number_token(token):
            return self._number(token, start)
        raise self.error(
            f"identifiers cannot be used as values, quote `{token}` instead", start
        )

    def _number(self, token: str, start: int) -> int | float:
        for pattern, base in ((_HEX, 16), (_OCTAL, 8), (_BINARY, 2)):
            if pattern.fullmatch(token):
                sign = -1 if token[0] == "-" else 1
                digits = token.lstrip("+-")[2:].replace("_", "")
                return sign * int(digits, base)
        match = _DECIMAL.fullmatch(token)
        if match is None:
            raise self.error(f"invalid number `{token}`", start)
        digits = token.replace("_", "")
        if match.group("fraction") or match.group("exponent"):
            return float(digits)
        return int(digits)

    # -- strings ----------------------------------------------------------

    def _at_string(self) -> bool:
        return self.peek() == '"' or bool(
            _RAW_STRING_START.match(self.text, self.pos)
        )

    def _parse_string(self) -> str:
        if self.peek() == '"':
            return self._parse_escaped_string()
        return self._parse_raw_string()

    def _parse_escaped_string(self) -> str:
        start = self.pos
        self.pos += 1
        parts: list[str] = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self.error("unterminated string", start)
            char = text[self.pos]
            if char == '"':
                self.pos += 1
                return "".join(parts)
            if char != "\\":
                parts.append(char)
                self.pos += 1
                continue
            escape_pos = self.pos
            self.pos += 1
            code = self.peek()
            if code in _ESCAPES and code:
                parts.append(_ESCAPES[code])
                self.pos += 1
            elif code == "u":
                parts.append(self._parse_unicode_escape(escape_pos))
            else:
                raise self.error(f"invalid escape `\\{code}`", escape_pos)

    def _parse_unicode_escape(self, escape_pos: int) -> str:
        match = re.compile(r"u\{([0-9a-fA-F]{1,6})\}").match(self.text, self.pos)
        if match is None:
            raise self.error("invalid unicode escape", escape_pos)
        codepoint = int(match.group(1), 16)
        if codepoint > 0x10FFFF or 0xD800 <= codepoint <= 0xDFFF:
            raise self.error("unicode escape is not a scalar value", escape_pos)
        self.pos = match.end()
        return chr(codepoint)

    def _parse_raw_string(self) -> str:
        start = self.pos
        match = _RAW_STRING_START.match(self.text, self.pos)
        hashes = match.end() - self.pos - 2
        closing = '"' + "#" * hashes
        end = self.text.find(closing, match.end())
        if end < 0:
            raise self.error("unterminated raw string", start)
        self.pos = end + len(closing)
        return self.text[match.end() : end]


def parse_document(text: str, filename: str = "<string>") -> KdlNode:
    """Parse a KDL document.

    The top-level nodes become the children of a returned root node with an
    empty name.
    """
    parser = _Parser(text, filename)
    nodes = parser.parse_nodes(nested=False)
    return KdlNode("", children=nodes, line=0, filename=filename)