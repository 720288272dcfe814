"""Indentation- and tab-tolerant tokenizer for AVML text.

Turns raw markup into a flat, ordered sequence of classified tokens. The
tokenizer never fails: sloppy input (mixed tabs and spaces, partial indents,
stuck list markers, missing colons) degrades to best-effort tokens plus
warnings.

Whether a ``Key: Value`` line opens a node or sets an attribute is only
*proposed* here, from position alone. The tree builder confirms the shape
and the schema validator settles the names, including whether a leaf
`Kind: Name` line inside a node is a child control or a property.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from avml.diagnostics import Diagnostic

logger = logging.getLogger(__name__)

DEFAULT_TAB_WIDTH = 2
DEFAULT_INDENT_UNIT = 2

COMMENT_PREFIXES = ("#", "//")
LIST_MARKER = "-"
CHILDREN_KEYWORD = "children"


class TokenKind(str, Enum):
    """Lexical classification of a token."""

    NODE_KIND = "node_kind"
    NODE_NAME = "node_name"
    ATTRIBUTE_NAME = "attribute_name"
    ATTRIBUTE_VALUE = "attribute_value"
    LIST_MARKER = "list_marker"
    COMMENT = "comment"
    BLANK_LINE = "blank_line"


# Tokens that carry no structure and are skipped by the builder
TRIVIA_KINDS = frozenset({TokenKind.COMMENT, TokenKind.BLANK_LINE})


@dataclass(frozen=True)
class Token:
    """A single classified piece of AVML text.

    Attributes:
        kind: Lexical classification.
        text: Token text with markers, quotes and escapes removed.
        line: 0-based physical line number.
        indent_level: Resolved indentation level (0 for comments/blank lines).
    """

    kind: TokenKind
    text: str
    line: int
    indent_level: int

    def __str__(self) -> str:
        return f"[Line {self.line + 1}] {self.kind.value}: {self.text}"


@dataclass
class _ContentLine:
    """A structural (non-blank, non-comment) physical line."""

    line: int
    level: int
    content: str
    is_list_item: bool


@dataclass
class _Context:
    """An open block on the positional context stack."""

    level: int
    is_children_block: bool


def _clean_artifacts(text: str) -> str:
    """Remove a UTF-8 BOM and normalize line endings to LF."""
    text = text.lstrip("\ufeff")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _starts_with_marker(text: str) -> bool:
    return text == LIST_MARKER or text[:2] in ("- ", "-\t")


def _find_key_separator(content: str) -> int:
    """Index of the first ':' not escaped by a backslash, or -1."""
    escaped = False
    for i, char in enumerate(content):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
            continue
        if char == ":":
            return i
    return -1


def _unescape(text: str) -> str:
    return text.replace("\\:", ":")


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def split_key_value(content: str) -> tuple[str, str, bool]:
    """Split ``Key: Value`` content on the first unescaped colon.

    Args:
        content: Line content with indentation and list marker removed.

    Returns:
        Tuple of (key, value, has_colon). Without a colon the whole content
        is the key and the value is empty.
    """
    index = _find_key_separator(content)
    if index == -1:
        return _unescape(content.strip()), "", False

    key = _unescape(content[:index].strip())
    value = _strip_quotes(_unescape(content[index + 1 :].strip()))
    return key, value, True


class Tokenizer:
    """Converts AVML text into classified tokens.

    Args:
        tab_width: Columns a tab counts for in leading whitespace.
        indent_unit: Columns per indentation level.
    """

    def __init__(
        self,
        tab_width: int = DEFAULT_TAB_WIDTH,
        indent_unit: int = DEFAULT_INDENT_UNIT,
    ):
        self.tab_width = max(1, tab_width)
        self.indent_unit = max(1, indent_unit)

    def measure(self, line: str) -> int:
        """Count leading whitespace columns, expanding tabs."""
        columns = 0
        for char in line:
            if char == "\t":
                columns += self.tab_width
            elif char.isspace():
                columns += 1
            else:
                break
        return columns

    def tokenize(self, text: str) -> tuple[list[Token], list[Diagnostic]]:
        """Tokenize AVML text.

        Args:
            text: Raw markup.

        Returns:
            Tuple of (tokens, warnings).
        """
        warnings: list[Diagnostic] = []
        tokens: list[Token] = []

        # Pass 1: physical analysis (trivia, indentation, list markers)
        slots: list[Token | _ContentLine] = []
        for number, raw in enumerate(_clean_artifacts(text).splitlines()):
            slots.append(self._analyze_line(number, raw, warnings))

        content_lines = [s for s in slots if isinstance(s, _ContentLine)]
        next_level = {
            current.line: following.level
            for current, following in zip(content_lines, content_lines[1:])
        }

        # Pass 2: positional node/attribute proposal
        stack: list[_Context] = []
        after_bare_marker = False
        for slot in slots:
            if isinstance(slot, Token):
                tokens.append(slot)
                continue

            while stack and stack[-1].level >= slot.level:
                stack.pop()

            if slot.is_list_item:
                tokens.append(
                    Token(TokenKind.LIST_MARKER, LIST_MARKER, slot.line, slot.level)
                )
                if not slot.content:
                    after_bare_marker = True
                    continue

            opens_item = slot.is_list_item or after_bare_marker
            after_bare_marker = False
            self._classify(slot, opens_item, stack, next_level, tokens, warnings)

        logger.debug(f"Tokenized {len(slots)} lines into {len(tokens)} tokens")
        return tokens, warnings

    def _analyze_line(
        self, number: int, raw: str, warnings: list[Diagnostic]
    ) -> Token | _ContentLine:
        """Classify trivia and resolve indentation for one physical line."""
        stripped = raw.strip()
        if not stripped:
            return Token(TokenKind.BLANK_LINE, "", number, 0)
        if stripped.startswith(COMMENT_PREFIXES):
            return Token(TokenKind.COMMENT, stripped, number, 0)

        columns = self.measure(raw)
        level, remainder = divmod(columns, self.indent_unit)
        if remainder:
            warnings.append(
                Diagnostic(
                    number,
                    f"Irregular indentation ({columns} columns), using level {level}",
                )
            )

        is_list_item = False
        if _starts_with_marker(stripped):
            is_list_item = True
            stripped = stripped[1:].strip()
            extra = 0
            while _starts_with_marker(stripped):
                stripped = stripped[1:].strip()
                extra += 1
            if extra:
                warnings.append(
                    Diagnostic(number, f"Ignoring {extra} repeated list marker(s)")
                )
        elif stripped.startswith(LIST_MARKER) and stripped[1:2].isalpha():
            # "-MenuItem: X" -> "- MenuItem: X"
            is_list_item = True
            stripped = stripped[1:]
            warnings.append(Diagnostic(number, "Missing space after list marker"))

        return _ContentLine(number, level, stripped, is_list_item)

    def _classify(
        self,
        slot: _ContentLine,
        opens_item: bool,
        stack: list[_Context],
        next_level: dict[int, int],
        tokens: list[Token],
        warnings: list[Diagnostic],
    ) -> None:
        """Emit the key/value tokens for one content line."""
        key, value, has_colon = split_key_value(slot.content)
        line, level = slot.line, slot.level

        if not key:
            warnings.append(Diagnostic(line, f"Value '{value}' has no key, ignoring"))
            tokens.append(Token(TokenKind.ATTRIBUTE_VALUE, value, line, level))
            return

        if not has_colon:
            warnings.append(
                Diagnostic(line, f"Missing ':' after '{key}', treating as empty property")
            )
            tokens.append(Token(TokenKind.ATTRIBUTE_NAME, key, line, level))
            tokens.append(Token(TokenKind.ATTRIBUTE_VALUE, "", line, level))
            return

        if key.lower() == CHILDREN_KEYWORD:
            stack.append(_Context(level, is_children_block=True))
            tokens.append(Token(TokenKind.ATTRIBUTE_NAME, key, line, level))
            tokens.append(Token(TokenKind.ATTRIBUTE_VALUE, value, line, level))
            return

        in_node = bool(stack) and not stack[-1].is_children_block
        owns_block = next_level.get(line, -1) > level
        if opens_item or not in_node or owns_block:
            stack.append(_Context(level, is_children_block=False))
            tokens.append(Token(TokenKind.NODE_KIND, key, line, level))
            if value:
                tokens.append(Token(TokenKind.NODE_NAME, value, line, level))
            return

        tokens.append(Token(TokenKind.ATTRIBUTE_NAME, key, line, level))
        tokens.append(Token(TokenKind.ATTRIBUTE_VALUE, value, line, level))


def tokenize(
    text: str,
    tab_width: int = DEFAULT_TAB_WIDTH,
    indent_unit: int = DEFAULT_INDENT_UNIT,
) -> tuple[list[Token], list[Diagnostic]]:
    """Tokenize AVML text with a one-off Tokenizer.

    Args:
        text: Raw markup.
        tab_width: Columns a tab counts for.
        indent_unit: Columns per indentation level.

    Returns:
        Tuple of (tokens, warnings).
    """
    return Tokenizer(tab_width=tab_width, indent_unit=indent_unit).tokenize(text)


__all__ = [
    "DEFAULT_INDENT_UNIT",
    "DEFAULT_TAB_WIDTH",
    "CHILDREN_KEYWORD",
    "TRIVIA_KINDS",
    "Token",
    "TokenKind",
    "Tokenizer",
    "split_key_value",
    "tokenize",
]
