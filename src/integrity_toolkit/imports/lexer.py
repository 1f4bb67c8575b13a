"""
Module: imports.lexer

Purpose:
    Tokenizer for TypeScript/JavaScript source, precise enough to find
    import statements reliably. Comments are skipped; string, template
    and regular-expression literals are consumed whole so quote or
    keyword characters inside them never produce spurious tokens.

Key Functions:
    - tokenize(): Source text -> list of Tokens (ending with EOF)

Key Classes:
    - Token: Kind, value and 1-based line number
    - TokenKind: Token categories

Dependencies:
    - dataclasses, enum (std)

Used By:
    - imports.syntax: Parser
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional


class TokenKind(str, Enum):
    """Category of a lexical token."""
    IDENT = "ident"
    STRING = "string"
    TEMPLATE = "template"
    NUMBER = "number"
    REGEX = "regex"
    PUNCT = "punct"
    EOF = "eof"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Token:
    """
    One lexical token.

    Attributes:
        kind: Token category
        value: Identifier name, decoded string contents, or punctuation
        line: 1-based line where the token starts
    """
    kind: TokenKind
    value: str
    line: int

    def is_punct(self, value: str) -> bool:
        return self.kind is TokenKind.PUNCT and self.value == value

    def is_ident(self, value: str) -> bool:
        return self.kind is TokenKind.IDENT and self.value == value


# Keywords after which a '/' starts a regular expression, not a division.
_REGEX_PRECEDING_KEYWORDS = frozenset({
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
})

_SIMPLE_ESCAPES = {
    "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0",
}


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch in "_$"


def _is_ident_part(ch: str) -> bool:
    return ch.isalnum() or ch in "_$"


class Lexer:
    """
    Single-pass tokenizer.

    Template literals are tracked with a stack of brace depths so that a
    `}` closing a `${...}` substitution resumes the template instead of
    being emitted as punctuation.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1
        self.tokens: List[Token] = []
        self._brace_depth = 0
        self._template_stack: List[int] = []

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def _emit(self, kind: TokenKind, value: str, line: int) -> None:
        self.tokens.append(Token(kind, value, line))

    def _last(self) -> Optional[Token]:
        return self.tokens[-1] if self.tokens else None

    def _regex_allowed(self) -> bool:
        last = self._last()
        if last is None:
            return True
        if last.kind is TokenKind.PUNCT:
            # '</' is a JSX closing tag, not a regex
            return last.value not in (")", "]", "}", "<")
        if last.kind is TokenKind.IDENT:
            return last.value in _REGEX_PRECEDING_KEYWORDS
        return False

    # ------------------------------------------------------------------
    # Scanners
    # ------------------------------------------------------------------

    def _skip_line_comment(self) -> None:
        end = self.text.find("\n", self.pos)
        self.pos = len(self.text) if end == -1 else end

    def _skip_block_comment(self) -> None:
        end = self.text.find("*/", self.pos + 2)
        stop = len(self.text) if end == -1 else end + 2
        self.line += self.text.count("\n", self.pos, stop)
        self.pos = stop

    def _read_escape(self) -> str:
        """Decode the escape sequence after a backslash (pos at backslash)."""
        ch = self._peek(1)
        self.pos += 2
        if ch == "\n":
            self.line += 1
            return ""
        if ch in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[ch]
        if ch == "x":
            digits = self.text[self.pos:self.pos + 2]
            try:
                value = chr(int(digits, 16))
            except ValueError:
                return "x"
            self.pos += 2
            return value
        if ch == "u":
            if self._peek() == "{":
                end = self.text.find("}", self.pos)
                digits = self.text[self.pos + 1:end] if end != -1 else ""
                width = len(digits) + 2
            else:
                digits = self.text[self.pos:self.pos + 4]
                width = 4
            try:
                value = chr(int(digits, 16))
            except ValueError:
                return "u"
            self.pos += width
            return value
        return ch

    def _read_string(self, quote: str) -> None:
        line = self.line
        self.pos += 1
        chars: List[str] = []
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == quote:
                self.pos += 1
                self._emit(TokenKind.STRING, "".join(chars), line)
                return
            if ch == "\\":
                chars.append(self._read_escape())
                continue
            if ch == "\n":
                # Unterminated: strings cannot span lines
                return
            chars.append(ch)
            self.pos += 1

    def _read_template(self) -> None:
        """Scan template text up to the closing backtick or a `${`."""
        line = self.line
        chars: List[str] = []
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch == "`":
                self.pos += 1
                self._emit(TokenKind.TEMPLATE, "".join(chars), line)
                return
            if ch == "\\":
                chars.append(self._read_escape())
                continue
            if ch == "$" and self._peek(1) == "{":
                self.pos += 2
                self._emit(TokenKind.TEMPLATE, "".join(chars), line)
                self._brace_depth += 1
                self._template_stack.append(self._brace_depth)
                return
            if ch == "\n":
                self.line += 1
            chars.append(ch)
            self.pos += 1
        self._emit(TokenKind.TEMPLATE, "".join(chars), line)

    def _read_regex(self) -> bool:
        """Consume a regex literal; False (nothing consumed) if none on this line."""
        start = self.pos
        index = self.pos + 1
        in_class = False
        while index < len(self.text):
            ch = self.text[index]
            if ch == "\n":
                return False
            if ch == "\\":
                index += 2
                continue
            if ch == "[":
                in_class = True
            elif ch == "]":
                in_class = False
            elif ch == "/" and not in_class:
                index += 1
                while index < len(self.text) and _is_ident_part(self.text[index]):
                    index += 1
                self._emit(TokenKind.REGEX, self.text[start:index], self.line)
                self.pos = index
                return True
            index += 1
        return False

    def _read_word(self, kind: TokenKind) -> None:
        start = self.pos
        while self.pos < len(self.text) and (
            _is_ident_part(self.text[self.pos])
            or (kind is TokenKind.NUMBER and self.text[self.pos] == ".")
        ):
            self.pos += 1
        self._emit(kind, self.text[start:self.pos], self.line)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def tokenize(self) -> List[Token]:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]

            if ch == "\n":
                self.line += 1
                self.pos += 1
            elif ch.isspace():
                self.pos += 1
            elif ch == "/" and self._peek(1) == "/":
                self._skip_line_comment()
            elif ch == "/" and self._peek(1) == "*":
                self._skip_block_comment()
            elif ch in "'\"":
                self._read_string(ch)
            elif ch == "`":
                self.pos += 1
                self._read_template()
            elif _is_ident_start(ch):
                self._read_word(TokenKind.IDENT)
            elif ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
                self._read_word(TokenKind.NUMBER)
            elif ch == "/" and self._regex_allowed() and self._read_regex():
                pass
            elif ch == "}" and self._template_stack and self._template_stack[-1] == self._brace_depth:
                # End of a template substitution
                self._template_stack.pop()
                self._brace_depth -= 1
                self.pos += 1
                self._read_template()
            else:
                if ch == "{":
                    self._brace_depth += 1
                elif ch == "}":
                    self._brace_depth -= 1
                self._emit(TokenKind.PUNCT, ch, self.line)
                self.pos += 1

        self._emit(TokenKind.EOF, "", self.line)
        return self.tokens


def tokenize(text: str) -> List[Token]:
    """
    Tokenize source text.

    Args:
        text: TypeScript or JavaScript source

    Returns:
        Tokens in source order, always ending with an EOF token

    Example:
        >>> [t.value for t in tokenize('import "x";')]
        ['import', 'x', ';', '']
    """
    return Lexer(text).tokenize()
