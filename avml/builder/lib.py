"""Indentation-driven tree builder.

Consumes the tokenizer's flat token stream with a single forward cursor and
assembles the raw node tree. The builder is structurally forgiving: orphan
properties, missing names and over-indented children produce warnings, and a
root node is always returned. Names are left for the schema validator to
settle, and so is the meaning of each `Key: Value` line inside a node: the
lines are kept in `Node.attribute_lines` because a leaf child control reads
exactly like a property.
"""

import logging
from collections.abc import Sequence

from avml.diagnostics import Diagnostic
from avml.tokenizer import CHILDREN_KEYWORD, TRIVIA_KINDS, Token, TokenKind
from avml.tree import AttributeLine, Node

logger = logging.getLogger(__name__)

# Tokens the cursor steps over without structural meaning
SKIPPED_KINDS = TRIVIA_KINDS | {TokenKind.LIST_MARKER}


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


class TreeBuilder:
    """Builds a node tree from one token sequence.

    A builder instance is single-use: it owns the cursor and the warning
    list of one build.

    Args:
        tokens: Tokens from `avml.tokenizer.tokenize`, trivia included.
    """

    def __init__(self, tokens: Sequence[Token]):
        self._tokens = list(tokens)
        self._pos = 0
        self.warnings: list[Diagnostic] = []

    def build(self) -> tuple[Node, list[Diagnostic]]:
        """Build the tree.

        Returns:
            Tuple of (synthetic root node, warnings).
        """
        root = Node.root()
        # Parent indent -1 collects every top-level node
        root.children.extend(self._build_children(-1))
        logger.debug(f"Built {len(root.children)} top-level nodes")
        return root, self.warnings

    # =========================================================================
    # Cursor
    # =========================================================================

    def _peek(self) -> Token | None:
        """Return the next structural token without consuming it."""
        while self._pos < len(self._tokens):
            token = self._tokens[self._pos]
            if token.kind not in SKIPPED_KINDS:
                return token
            self._pos += 1
        return None

    def _advance(self) -> Token:
        token = self._peek()
        if token is None:
            raise IndexError("token stream exhausted")
        self._pos += 1
        return token

    def _take_value(self, name_token: Token) -> str:
        """Consume the value paired with an attribute name, if present."""
        token = self._peek()
        if (
            token is not None
            and token.kind is TokenKind.ATTRIBUTE_VALUE
            and token.line == name_token.line
        ):
            self._pos += 1
            return token.text
        return ""

    # =========================================================================
    # Grammar
    # =========================================================================

    def _build_children(self, parent_indent: int) -> list[Node]:
        """Collect sibling nodes deeper than ``parent_indent``."""
        children: list[Node] = []
        while (token := self._peek()) is not None:
            if token.indent_level <= parent_indent:
                break

            if token.kind is TokenKind.NODE_KIND:
                children.append(self._build_node())
            elif token.kind is TokenKind.ATTRIBUTE_NAME:
                self._advance()
                self._take_value(token)
                self.warnings.append(
                    Diagnostic(
                        token.line,
                        f"Property '{token.text}' has no parent control, skipping",
                    )
                )
            else:
                # Stray value or name; the tokenizer already reported it
                self._advance()
        return children

    def _build_node(self) -> Node:
        """Consume one node with its properties and nested children."""
        head = self._advance()
        indent = head.indent_level
        kind = _capitalize_first(head.text)

        token = self._peek()
        if (
            token is not None
            and token.kind is TokenKind.NODE_NAME
            and token.line == head.line
        ):
            self._advance()
            name = token.text
        else:
            name = f"{kind}{head.line + 1}"
            self.warnings.append(
                Diagnostic(head.line, f"Control '{kind}' has no name, using '{name}'")
            )

        node = Node(kind=kind, name=name, source_line=head.line)
        if kind != head.text:
            node.source_kind = head.text
        expected = indent + 1

        while (token := self._peek()) is not None and token.indent_level > indent:
            if token.kind is TokenKind.NODE_KIND:
                if token.indent_level > expected:
                    self.warnings.append(
                        Diagnostic(
                            token.line,
                            f"Over-indented control '{token.text}', adjusting to "
                            f"level {expected}",
                        )
                    )
                node.children.append(self._build_node())
            elif token.kind is TokenKind.ATTRIBUTE_NAME:
                self._advance()
                value = self._take_value(token)
                if token.text.lower() == CHILDREN_KEYWORD:
                    if value:
                        self.warnings.append(
                            Diagnostic(
                                token.line,
                                f"Ignoring value '{value}' after '{token.text}:'",
                            )
                        )
                    node.children.extend(self._build_children(token.indent_level))
                else:
                    node.attribute_lines.append(
                        AttributeLine(
                            token.text, value, token.line, token.indent_level, expected
                        )
                    )
                    node.properties[token.text] = value
            else:
                self._advance()

        return node


def build(tokens: Sequence[Token]) -> tuple[Node, list[Diagnostic]]:
    """Build a node tree from tokens.

    Args:
        tokens: Token sequence from the tokenizer.

    Returns:
        Tuple of (synthetic root node, warnings).
    """
    return TreeBuilder(tokens).build()


__all__ = ["TreeBuilder", "build"]
