"""Builder module - structural pass from tokens to a node tree.

Example usage:
    >>> from avml.tokenizer import tokenize
    >>> from avml.builder import build
    >>> tokens, _ = tokenize("MenuItem: File\\n  Header: _File")
    >>> root, warnings = build(tokens)
    >>> root.children[0].properties["Header"]
    '_File'
"""

from .lib import TreeBuilder, build

__all__ = ["TreeBuilder", "build"]
