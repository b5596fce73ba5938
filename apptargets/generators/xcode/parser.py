"""
Xcode project file parser.

Reads the OpenStep-style property list used by .pbxproj files into plain
Python values: dictionaries, lists and strings. Comments are discarded,
numbers are kept as strings so that formatting them again is lossless.
"""

from typing import Any, Dict, List

UNQUOTED_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_$/:.-+<>"
)

ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "'": "'",
    "\\": "\\",
}


class PBXParser:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def parse(self) -> Any:
        # Skip the encoding marker (a comment) and any leading whitespace
        self._skip_whitespace()
        value = self._parse_value()
        self._skip_whitespace()
        if self.pos != len(self.text):
            self._fail("unexpected trailing content")
        return value

    def _fail(self, message: str):
        line = self.text.count("\n", 0, self.pos) + 1
        raise ValueError(f"invalid project file, line {line}: {message}")

    def _peek(self) -> str:
        if self.pos >= len(self.text):
            self._fail("unexpected end of input")
        return self.text[self.pos]

    def _skip_whitespace(self):
        while self.pos < len(self.text):
            c = self.text[self.pos]
            if c.isspace():
                self.pos += 1
            elif self.text.startswith("//", self.pos):
                end = self.text.find("\n", self.pos)
                self.pos = len(self.text) if end < 0 else end + 1
            elif self.text.startswith("/*", self.pos):
                end = self.text.find("*/", self.pos + 2)
                if end < 0:
                    self._fail("unterminated comment")
                self.pos = end + 2
            else:
                break

    def _expect(self, c: str):
        self._skip_whitespace()
        if self._peek() != c:
            self._fail(f"expected '{c}', found '{self._peek()}'")
        self.pos += 1

    def _parse_value(self) -> Any:
        self._skip_whitespace()
        c = self._peek()
        if c == "{":
            return self._parse_dict()
        elif c == "(":
            return self._parse_list()
        elif c in "\"'":
            return self._parse_quoted()
        return self._parse_unquoted()

    def _parse_dict(self) -> Dict[str, Any]:
        self._expect("{")
        result: Dict[str, Any] = {}
        while True:
            self._skip_whitespace()
            if self._peek() == "}":
                self.pos += 1
                return result
            key = self._parse_value()
            if not isinstance(key, str):
                self._fail("dictionary keys must be strings")
            self._expect("=")
            result[key] = self._parse_value()
            self._expect(";")

    def _parse_list(self) -> List[Any]:
        self._expect("(")
        result: List[Any] = []
        while True:
            self._skip_whitespace()
            if self._peek() == ")":
                self.pos += 1
                return result
            result.append(self._parse_value())
            self._skip_whitespace()
            # Trailing comma before the closing paren is allowed
            if self._peek() == ",":
                self.pos += 1
            elif self._peek() != ")":
                self._fail(f"expected ',' or ')', found '{self._peek()}'")

    def _parse_quoted(self) -> str:
        quote = self._peek()
        self.pos += 1
        chars = []
        while True:
            c = self._peek()
            self.pos += 1
            if c == quote:
                return "".join(chars)
            if c == "\\":
                escaped = self._peek()
                self.pos += 1
                chars.append(ESCAPES.get(escaped, escaped))
            else:
                chars.append(c)

    def _parse_unquoted(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in UNQUOTED_CHARS:
            self.pos += 1
        if start == self.pos:
            self._fail(f"unexpected character '{self.text[self.pos]}'")
        return self.text[start : self.pos]


def parse_pbxproj(text: str) -> Dict[str, Any]:
    value = PBXParser(text).parse()
    if not isinstance(value, dict) or not isinstance(value.get("objects"), dict):
        raise ValueError("invalid project file, missing objects dictionary")
    return value
