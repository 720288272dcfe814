"""Tree module - UI node model and downstream export.

Example usage:
    >>> from avml.tree import Node, to_records
    >>> root = Node.root()
    >>> root.children.append(Node("MenuItem", "File", {"Header": "_File"}))
    >>> to_records(root)[0].properties
    {'Header': '_File'}
"""

from .lib import (
    AttributeLine,
    Node,
    NodeRecord,
    PropertyMap,
    count_nodes,
    count_properties,
    export_record_schema,
    export_records_json,
    iter_nodes,
    to_records,
)

__all__ = [
    "AttributeLine",
    "Node",
    "NodeRecord",
    "PropertyMap",
    "count_nodes",
    "count_properties",
    "export_record_schema",
    "export_records_json",
    "iter_nodes",
    "to_records",
]
