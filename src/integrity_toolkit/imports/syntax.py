"""
Module: imports.syntax

Purpose:
    A deliberately small syntax tree for module-level structure of a
    TypeScript source file: import declarations, import-equals
    declarations, and (possibly nested) module/namespace blocks that can
    contain them. Everything else in the file is skipped by the parser;
    there is no attempt to model the full grammar.

Key Classes:
    - SourceFile, ModuleDeclaration: Containers
    - ImportDeclaration: `import ... from "x"` / `import "x"`
    - ImportEqualsDeclaration: `import a = require("x")` / `import a = N.M`
    - ExternalModuleReference, EntityNameReference: import-equals targets
    - NodeVisitor: Dispatches `visit_<ClassName>` like ast.NodeVisitor

Key Functions:
    - parse(): Source text -> SourceFile

Dependencies:
    - .lexer: Tokenizer

Used By:
    - imports.extractor: ImportCollector
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple, Union

from .lexer import Token, TokenKind, tokenize


# ─────────────────────────────────────────────────────────────────────────────
# Nodes
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class Node:
    """Base class of all syntax nodes."""

    def children(self) -> Iterator["Node"]:
        return iter(())


@dataclass
class SourceFile(Node):
    statements: List[Node] = field(default_factory=list)

    def children(self) -> Iterator[Node]:
        return iter(self.statements)


@dataclass
class ModuleDeclaration(Node):
    """`declare module "x" { ... }`, `namespace A.B { ... }`."""
    name: str
    body: List[Node] = field(default_factory=list)
    line: int = 0

    def children(self) -> Iterator[Node]:
        return iter(self.body)


@dataclass
class ImportDeclaration(Node):
    module_specifier: str
    type_only: bool = False
    line: int = 0


@dataclass
class ExternalModuleReference(Node):
    """The `require("x")` side of an import-equals declaration."""
    expression: str


@dataclass
class EntityNameReference(Node):
    """A qualified name like `Foo.Bar` on the right of an import-equals."""
    name: str


ModuleReference = Union[ExternalModuleReference, EntityNameReference]


@dataclass
class ImportEqualsDeclaration(Node):
    name: str
    module_reference: ModuleReference
    type_only: bool = False
    line: int = 0

    def children(self) -> Iterator[Node]:
        return iter((self.module_reference,))


class NodeVisitor:
    """
    Walks a syntax tree, calling `visit_<ClassName>` for each node.

    Nodes without a matching method fall through to generic_visit, which
    visits the node's children. Subclasses that handle a node and still
    want its children visited must call generic_visit themselves.
    """

    def visit(self, node: Node) -> Any:
        method = getattr(self, f"visit_{type(node).__name__}", self.generic_visit)
        return method(node)

    def generic_visit(self, node: Node) -> None:
        for child in node.children():
            self.visit(child)


# ─────────────────────────────────────────────────────────────────────────────
# Parser
# ─────────────────────────────────────────────────────────────────────────────

# Tokens that may appear between `import` and `from` in an import clause.
_CLAUSE_PUNCT = frozenset({"*", ",", "{", "}"})


class Parser:
    """
    Recognizes import statements and module blocks in a token stream.

    Brace depth is tracked so that a module block's body ends at its own
    closing brace; braces anywhere else are only counted.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.index = 0

    def _at(self, offset: int = 0) -> Token:
        index = min(self.index + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _previous(self) -> Optional[Token]:
        return self.tokens[self.index - 1] if self.index > 0 else None

    def parse(self) -> SourceFile:
        source = SourceFile()
        # (body, brace depth at which the body closes)
        stack: List[Tuple[List[Node], int]] = [(source.statements, -1)]
        depth = 0

        while self._at().kind is not TokenKind.EOF:
            token = self._at()
            previous = self._previous()
            after_dot = previous is not None and previous.is_punct(".")

            if token.is_punct("{"):
                depth += 1
                self.index += 1
            elif token.is_punct("}"):
                if len(stack) > 1 and stack[-1][1] == depth:
                    stack.pop()
                depth -= 1
                self.index += 1
            elif token.is_ident("import") and not after_dot:
                node = self._parse_import()
                if node is not None:
                    stack[-1][0].append(node)
            elif token.kind is TokenKind.IDENT and token.value in ("module", "namespace") and not after_dot:
                module = self._parse_module_header()
                if module is None:
                    self.index += 1
                else:
                    stack[-1][0].append(module)
                    depth += 1
                    stack.append((module.body, depth))
            else:
                self.index += 1

        return source

    def _parse_module_header(self) -> Optional[ModuleDeclaration]:
        """`module "x" {` or `namespace A.B {`; index ends after `{`."""
        line = self._at().line
        offset = 1
        name_token = self._at(offset)
        if name_token.kind is TokenKind.STRING:
            name = name_token.value
            offset += 1
        elif name_token.kind is TokenKind.IDENT:
            parts = [name_token.value]
            offset += 1
            while self._at(offset).is_punct(".") and self._at(offset + 1).kind is TokenKind.IDENT:
                parts.append(self._at(offset + 1).value)
                offset += 2
            name = ".".join(parts)
        else:
            return None
        if not self._at(offset).is_punct("{"):
            return None
        self.index += offset + 1
        return ModuleDeclaration(name=name, line=line)

    def _parse_import(self) -> Optional[Node]:
        """
        Parse starting at an `import` keyword.

        Always advances past `import`; returns None for `import(...)`,
        `import.meta` and anything else that is not a declaration.
        """
        line = self._at().line
        following = self._at(1)

        if following.is_punct("(") or following.is_punct("."):
            self.index += 1
            return None

        # import "x";
        if following.kind is TokenKind.STRING:
            self.index += 2
            return ImportDeclaration(following.value, line=line)

        offset = 1
        type_only = (
            following.is_ident("type")
            and not self._at(2).is_punct("=")
            and not self._at(2).is_ident("from")
            and not self._at(2).is_punct(",")
        )
        if type_only:
            offset += 1

        # import a = require("x");  import a = A.B;
        if self._at(offset).kind is TokenKind.IDENT and self._at(offset + 1).is_punct("="):
            name = self._at(offset).value
            offset += 2
            return self._parse_import_equals(name, offset, type_only, line)

        # import <clause> from "x";
        while True:
            token = self._at(offset)
            if token.is_ident("from") and self._at(offset + 1).kind is TokenKind.STRING:
                self.index += offset + 2
                return ImportDeclaration(self._at(-1).value, type_only=type_only, line=line)
            if token.kind is TokenKind.IDENT or (
                token.kind is TokenKind.PUNCT and token.value in _CLAUSE_PUNCT
            ):
                offset += 1
                continue
            self.index += 1
            return None

    def _parse_import_equals(
        self, name: str, offset: int, type_only: bool, line: int
    ) -> Optional[Node]:
        if (
            self._at(offset).is_ident("require")
            and self._at(offset + 1).is_punct("(")
            and self._at(offset + 2).kind is TokenKind.STRING
            and self._at(offset + 3).is_punct(")")
        ):
            reference: ModuleReference = ExternalModuleReference(self._at(offset + 2).value)
            self.index += offset + 4
            return ImportEqualsDeclaration(name, reference, type_only=type_only, line=line)

        if self._at(offset).kind is TokenKind.IDENT:
            parts = [self._at(offset).value]
            offset += 1
            while self._at(offset).is_punct(".") and self._at(offset + 1).kind is TokenKind.IDENT:
                parts.append(self._at(offset + 1).value)
                offset += 2
            self.index += offset
            return ImportEqualsDeclaration(
                name, EntityNameReference(".".join(parts)), type_only=type_only, line=line
            )

        self.index += 1
        return None


def parse(text: str) -> SourceFile:
    """
    Parse source text into a SourceFile.

    Example:
        >>> tree = parse('import { a } from "lib";')
        >>> tree.statements
        [ImportDeclaration(module_specifier='lib', type_only=False, line=1)]
    """
    return Parser(tokenize(text)).parse()
