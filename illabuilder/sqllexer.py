"""A small SQL tokenizer, enough to classify statements by their leading keyword."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum


class TokenType(IntEnum):
    """Kinds of tokens produced by :class:`Lexer`."""

    EOF = 0
    NOT = 1
    LEFT_PAREN = 2
    RIGHT_PAREN = 3
    LEFT_BRACKET = 4
    RIGHT_BRACKET = 5
    LEFT_BRACE = 6
    RIGHT_BRACE = 7
    LT = 8
    GT = 9
    COLON = 10
    SEMICOLON = 11
    DOT = 12
    COMMA = 13
    EQUAL = 14
    AT = 15
    AND = 16
    VERTICAL_BAR = 17
    QUOTE = 18
    DUOQUOTE = 19
    SINGLE_QUOTE = 20
    DUO_SINGLE_QUOTE = 21
    BACKQUOTE = 22
    ESCAPE_CHARACTER = 23
    MULTI_LINE_COMMENT_START = 24
    MULTI_LINE_COMMENT_END = 25
    COMMENT_SHARP = 26
    SINGLE_LINE_COMMENT = 27
    NUMBER = 28
    SELECT = 29
    UPDATE = 30
    DELETE = 31
    CREATE = 32
    INSERT = 33
    OTHER_TOKEN = 34


TOKEN_NAMES: dict[TokenType, str] = {
    TokenType.EOF: "EOF",
    TokenType.NOT: "!",
    TokenType.LEFT_PAREN: "(",
    TokenType.RIGHT_PAREN: ")",
    TokenType.LEFT_BRACKET: "[",
    TokenType.RIGHT_BRACKET: "]",
    TokenType.LEFT_BRACE: "{",
    TokenType.RIGHT_BRACE: "}",
    TokenType.LT: "<",
    TokenType.GT: ">",
    TokenType.COLON: ":",
    TokenType.SEMICOLON: ";",
    TokenType.DOT: ".",
    TokenType.COMMA: ",",
    TokenType.EQUAL: "=",
    TokenType.AT: "@",
    TokenType.AND: "&",
    TokenType.VERTICAL_BAR: "|",
    TokenType.QUOTE: '"',
    TokenType.DUOQUOTE: '""',
    TokenType.SINGLE_QUOTE: "'",
    TokenType.DUO_SINGLE_QUOTE: "''",
    TokenType.BACKQUOTE: "`",
    TokenType.ESCAPE_CHARACTER: "\\",
    TokenType.MULTI_LINE_COMMENT_START: "/*",
    TokenType.MULTI_LINE_COMMENT_END: "*/",
    TokenType.COMMENT_SHARP: "#",
    TokenType.SINGLE_LINE_COMMENT: "--",
    TokenType.NUMBER: "number",
    TokenType.SELECT: "select",
    TokenType.UPDATE: "update",
    TokenType.DELETE: "delete",
    TokenType.CREATE: "create",
    TokenType.INSERT: "insert",
    TokenType.OTHER_TOKEN: "other_token",
}

KEYWORDS: dict[str, TokenType] = {
    "select": TokenType.SELECT,
    "update": TokenType.UPDATE,
    "delete": TokenType.DELETE,
    "create": TokenType.CREATE,
    "insert": TokenType.INSERT,
}

_SINGLE_CHAR_TOKENS: dict[str, TokenType] = {
    "!": TokenType.NOT,
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "[": TokenType.LEFT_BRACKET,
    "]": TokenType.RIGHT_BRACKET,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    "<": TokenType.LT,
    ">": TokenType.GT,
    ":": TokenType.COLON,
    ";": TokenType.SEMICOLON,
    ".": TokenType.DOT,
    ",": TokenType.COMMA,
    "=": TokenType.EQUAL,
    "@": TokenType.AT,
    "&": TokenType.AND,
    "|": TokenType.VERTICAL_BAR,
    "`": TokenType.BACKQUOTE,
}

_NEWLINES = "\r\n"
_WHITESPACE = "\t\n\v\f\r "
_LINE_END = re.compile(r"[\r\n]")
_WORD = re.compile(r"[_A-Za-z0-9]*")
_NUMBER = re.compile(r"[0-9a-fA-FxXpP.+\-]*")

_DEC_ESCAPE = re.compile(r"\\[0-9]{1,3}")
_HEX_ESCAPE = re.compile(r"\\x[0-9a-fA-F]{2}")
_UNICODE_ESCAPE = re.compile(r"\\u\{[0-9a-fA-F]+\}")
_SIMPLE_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "\n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    '"': '"',
    "'": "'",
    "\\": "\\",
}


class SQLLexError(ValueError):
    """Raised when SQL text cannot be tokenized."""


@dataclass
class Word:
    """A word of SQL text and the line it was found on."""

    line_num: int
    value: str


Words = list[Word]


@dataclass
class Token:
    """A token of SQL text and the line it was found on."""

    line_num: int
    value: str


@dataclass
class Statement:
    """One SQL statement split into tokens."""

    line_num: int = 0
    query_type: int = TokenType.EOF
    query: list[Token] = field(default_factory=list)


@dataclass
class SQL:
    """A sequence of statements."""

    last_line_num: int = 0
    statements: list[Statement] = field(default_factory=list)


def _is_letter(char: str) -> bool:
    return char.isascii() and char.isalpha()


class Lexer:
    """Splits SQL text into tokens, tracking line numbers."""

    def __init__(self, sql: str) -> None:
        self._source = sql
        self.pos = 0
        self.line_num = 1
        self._peeked: tuple[int, TokenType, str] | None = None

    @property
    def remaining(self) -> str:
        """The text not yet consumed."""
        return self._source[self.pos:]

    def _skip(self, count: int) -> None:
        self.pos += count

    def next_sql_is(self, prefix: str) -> bool:
        """Tell whether the unconsumed text starts with ``prefix``."""
        return self._source.startswith(prefix, self.pos)

    def skip_ignored(self) -> None:
        """Skip whitespace, line breaks and comments."""
        src = self._source
        while self.pos < len(src):
            char = src[self.pos]
            if self.next_sql_is("\r\n") or self.next_sql_is("\n\r"):
                self._skip(2)
                self.line_num += 1
            elif char in _NEWLINES:
                self._skip(1)
                self.line_num += 1
            elif char in _WHITESPACE:
                self._skip(1)
            elif self.next_sql_is(TOKEN_NAMES[TokenType.COMMENT_SHARP]) or self.next_sql_is(
                TOKEN_NAMES[TokenType.SINGLE_LINE_COMMENT]
            ):
                match = _LINE_END.search(src, self.pos + 1)
                self.pos = match.start() if match else len(src)
            elif self.next_sql_is(TOKEN_NAMES[TokenType.MULTI_LINE_COMMENT_START]):
                end = src.find(TOKEN_NAMES[TokenType.MULTI_LINE_COMMENT_END], self.pos)
                if end < 0:
                    raise SQLLexError(f"line {self.line_num}: unterminated multi-line comment.")
                self.pos = end + 2
            else:
                break

    def next_token_is(self, token_type: TokenType) -> tuple[int, str]:
        """Consume the next token, raising SQLLexError unless it has ``token_type``.

        Returns the token's line number and text.
        """
        line_num, found_type, token = self.get_next_token()
        if found_type != token_type:
            raise SQLLexError(f"line {self.line_num}: syntax error near '{token}'.")
        return line_num, token

    def look_ahead(self) -> TokenType:
        """Return the type of the next token without consuming it."""
        if self._peeked is not None:
            return self._peeked[1]
        current_line = self.line_num
        peeked = self.get_next_token()
        self.line_num = current_line
        self._peeked = peeked
        return peeked[1]

    def get_next_token(self) -> tuple[int, TokenType, str]:
        """Consume and return the next token as (line number, type, text)."""
        if self._peeked is not None:
            peeked, self._peeked = self._peeked, None
            self.line_num = peeked[0]
            return peeked
        return self.match_token()

    def match_token(self) -> tuple[int, TokenType, str]:
        """Scan the next token from the text, ignoring any peeked token."""
        self.skip_ignored()
        src = self._source
        if self.pos >= len(src):
            return self.line_num, TokenType.EOF, TOKEN_NAMES[TokenType.EOF]

        char = src[self.pos]
        single = _SINGLE_CHAR_TOKENS.get(char)
        if single is not None:
            self._skip(1)
            return self.line_num, single, char
        if char == '"':
            if self.next_sql_is('""'):
                self._skip(2)
                return self.line_num, TokenType.DUOQUOTE, '""'
            self._skip(1)
            return self.line_num, TokenType.QUOTE, '"'
        if char == "'":
            if self.next_sql_is("''"):
                self._skip(2)
                return self.line_num, TokenType.DUO_SINGLE_QUOTE, "''"
            self._skip(1)
            return self.line_num, TokenType.SINGLE_QUOTE, "'"

        if char == "_" or _is_letter(char):
            word = self._scan(_WORD).lower()
            return self.line_num, KEYWORDS.get(word, TokenType.OTHER_TOKEN), word
        if char in ".-" or char.isascii() and char.isdigit():
            return self.line_num, TokenType.NUMBER, self._scan(_NUMBER)

        raise SQLLexError(f"line {self.line_num}: unexpected symbol near '{char!r}'.")

    def _scan(self, pattern: re.Pattern[str]) -> str:
        match = pattern.match(self._source, self.pos)
        text = match.group() if match else ""
        self._skip(len(text))
        return text

    def _scan_before_token(self, token: str) -> str:
        """Consume and return the text before ``token``, which must be present."""
        end = self._source.find(token, self.pos)
        if end < 0:
            raise SQLLexError(f"can not find {token!r}.")
        text = self._source[self.pos:end]
        self.pos = end
        return text

    def _scan_before_char(self, target: str) -> str:
        """Consume the text before ``target``, stepping over escapes, and unescape it."""
        src = self._source
        index = self.pos
        while index < len(src):
            if src[index] == target:
                text = self.escape(src[self.pos:index])
                self.pos = index
                return text
            index += 2 if src[index] == "\\" else 1
        raise SQLLexError("Can not find target byte.")

    def escape(self, text: str) -> str:
        """Replace backslash escape sequences in ``text`` with their characters."""
        parts: list[str] = []
        index = 0
        length = len(text)
        while index < length:
            char = text[index]
            if char != "\\":
                parts.append(char)
                index += 1
                continue
            if index + 1 == length:
                raise SQLLexError("unfinished string")

            code = text[index + 1]
            if code in _SIMPLE_ESCAPES:
                parts.append(_SIMPLE_ESCAPES[code])
                index += 2
                continue
            if code.isascii() and code.isdigit():
                match = _DEC_ESCAPE.match(text, index)
                value = int(match.group()[1:])
                if value > 0xFF:
                    raise SQLLexError(f"decimal escape too large near '{match.group()}'")
                parts.append(chr(value))
                index = match.end()
                continue
            if code == "x":
                match = _HEX_ESCAPE.match(text, index)
                if match:
                    parts.append(chr(int(match.group()[2:], 16)))
                    index = match.end()
                    continue
            elif code == "u":
                match = _UNICODE_ESCAPE.match(text, index)
                if match:
                    value = int(match.group()[3:-1], 16)
                    if value > 0x10FFFF:
                        raise SQLLexError(f"UTF-8 value too large near '{match.group()}'")
                    parts.append("\ufffd" if 0xD800 <= value <= 0xDFFF else chr(value))
                    index = match.end()
                    continue
            elif code == "z":
                index += 2
                while index < length and text[index] in _WHITESPACE:
                    index += 1
                continue
            raise SQLLexError(f"invalid escape sequence near '\\{code}'")
        return "".join(parts)