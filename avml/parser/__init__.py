"""Parser module - runs tokenizer, builder and validator as one pipeline.

Example usage:
    >>> from avml.parser import parse_text
    >>> result = parse_text("menuitem: File\\n  header: _File")
    >>> result.node_count, len(result.corrections)
    (1, 2)
"""

from .lib import AVMLParser, ParseResult, parse_text

__all__ = ["AVMLParser", "ParseResult", "parse_text"]
