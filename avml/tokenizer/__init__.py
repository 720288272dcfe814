"""Tokenizer module - lexical pass over AVML markup.

Example usage:
    >>> from avml.tokenizer import tokenize
    >>> tokens, warnings = tokenize("MenuItem: File\\n  Header: _File")
    >>> [t.kind.value for t in tokens]
    ['node_kind', 'node_name', 'attribute_name', 'attribute_value']
"""

from .lib import (
    CHILDREN_KEYWORD,
    DEFAULT_INDENT_UNIT,
    DEFAULT_TAB_WIDTH,
    TRIVIA_KINDS,
    Token,
    TokenKind,
    Tokenizer,
    split_key_value,
    tokenize,
)

__all__ = [
    "CHILDREN_KEYWORD",
    "DEFAULT_INDENT_UNIT",
    "DEFAULT_TAB_WIDTH",
    "TRIVIA_KINDS",
    "Token",
    "TokenKind",
    "Tokenizer",
    "split_key_value",
    "tokenize",
]
