"""Renders derived type trees as Avro schemas."""

import json
from typing import Any, Dict, List, Union

from avroderive.type_nodes import (ArrayType, PrimitiveType, RecordType,
                                   TypeNode, UnionType)

AvroSchema = Union[str, Dict[str, Any], List[Any]]


def to_avro_schema(node: TypeNode) -> AvroSchema:
    """Converts a type tree into its Avro schema structure.

    Records carry their fields already sorted by name and unions their
    branches already in rendering order, so the output only depends on the
    tree and not on the order in which documents listed their keys.

    Args:
        node: The derived type tree

    Returns:
        A primitive keyword, a dict for arrays and records, or a list for unions
    """
    if isinstance(node, PrimitiveType):
        return node.kind
    if isinstance(node, ArrayType):
        if node.name is not None:
            return {"name": node.name, "type": "array", "items": to_avro_schema(node.items)}
        return {"type": "array", "items": to_avro_schema(node.items)}
    if isinstance(node, RecordType):
        return {
            "type": "record",
            "name": node.name,
            "fields": [{"name": name, "type": to_avro_schema(field_type)}
                       for name, field_type in node.fields]
        }
    if isinstance(node, UnionType):
        return [to_avro_schema(branch) for branch in node.branches]
    raise TypeError(f"Not a type node: {node!r}")


def dump_schema_text(schema: Any) -> str:
    """Serializes a schema structure to compact canonical JSON text."""
    return json.dumps(schema, separators=(',', ':'), ensure_ascii=False)


def render_schema_text(node: TypeNode) -> str:
    """Renders a type tree to canonical schema text."""
    return dump_schema_text(to_avro_schema(node))
