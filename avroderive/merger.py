"""Builds and merges record and array types from parsed JSON values."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from avroderive.classifier import classify
from avroderive.constants import MAX_DERIVATION_DEPTH
from avroderive.errors import (Conflict, InvalidNameError,
                               InvalidStructureError, NestingDepthError)
from avroderive.type_nodes import (NULL, ArrayType, DerivationMode,
                                   RecordType, TypeNode)
from avroderive.unifier import unify, unify_all

# Configure module logger
logger = logging.getLogger(__name__)


def derive_type(value: Any, name: str, mode: DerivationMode,
                path: Optional[str] = None, depth: int = 0,
                max_depth: int = MAX_DERIVATION_DEPTH) -> TypeNode | Conflict:
    """Derives the type tree of a parsed JSON value.

    Objects become records named `name`; their fields are named after the
    keys and nested records are named after the field holding them. Array
    elements inherit the name of the array, so records inside an array are
    named after the array's field.

    Args:
        value: Parsed JSON value
        name: Name for a record at this position
        mode: Strict or lenient derivation
        path: Dotted location used in error messages
        depth: Current nesting depth
        max_depth: Nesting depth at which derivation gives up

    Returns:
        The type tree, or a Conflict
    """
    path = path or name
    if depth > max_depth:
        logger.warning("Maximum derivation depth exceeded at %s", path)
        return Conflict(NestingDepthError(
            f"Document nests deeper than {max_depth} levels", path))
    if isinstance(value, dict):
        return _derive_record(value, name, mode, path, depth, max_depth)
    if isinstance(value, list):
        return _derive_array(value, name, mode, path, depth, max_depth)
    result = classify(value, mode)
    if isinstance(result, Conflict):
        return result.at(path)
    return result


def _derive_record(value: Dict[str, Any], name: str, mode: DerivationMode,
                   path: str, depth: int, max_depth: int) -> TypeNode | Conflict:
    if not name:
        return Conflict(InvalidNameError("Record name must not be empty", path))
    fields: Dict[str, TypeNode] = {}
    for key, child in value.items():
        if not key:
            return Conflict(InvalidNameError("Field name must not be empty", path))
        field_type = derive_type(child, key, mode, f"{path}.{key}", depth + 1, max_depth)
        if isinstance(field_type, Conflict):
            return field_type
        fields[key] = field_type
    return RecordType.create(name, fields)


def _derive_array(value: List[Any], name: str, mode: DerivationMode,
                  path: str, depth: int, max_depth: int) -> TypeNode | Conflict:
    item_types = []
    for index, item in enumerate(value):
        item_type = derive_type(item, name, mode, f"{path}[{index}]", depth + 1, max_depth)
        if isinstance(item_type, Conflict):
            return item_type
        item_types.append(item_type)
    if not item_types:
        return ArrayType(NULL)
    items = unify_all(item_types, mode)
    if isinstance(items, Conflict):
        return items.at(path)
    return ArrayType(items)


def shapes_overlap(a: RecordType, b: RecordType) -> bool:
    """Records merge field-wise only when they share a field or one is empty."""
    return not a.fields or not b.fields or bool(a.field_names & b.field_names)


def merge_records(a: RecordType, b: RecordType, mode: DerivationMode) -> TypeNode | Conflict:
    """Merges two records by the union of their fields.

    A field present on one side only is kept as is; a field present on both
    sides is unified. Only strict derivation merges records this way.

    Args:
        a: First record
        b: Second record
        mode: Mode used to unify shared fields

    Returns:
        The merged record, or a Conflict naming the first incompatible field
    """
    fields = a.field_map()
    for name, field_type in b.fields:
        if name not in fields:
            fields[name] = field_type
            continue
        merged = unify(fields[name], field_type, mode)
        if isinstance(merged, Conflict):
            return Conflict(InvalidStructureError(
                f"Field '{name}' of record '{a.name}' has incompatible types ({merged.error.message})",
                name))
        fields[name] = merged
    return RecordType.create(a.name, fields)


def cluster_records(records: Sequence[RecordType], mode: DerivationMode) -> List[RecordType] | Conflict:
    """Merges every group of records whose shapes overlap.

    A record joins all clusters it overlaps with, so the result holds
    mutually disjoint shapes only.
    """
    clusters: List[RecordType] = []
    for record in records:
        merged = record
        remaining = []
        for cluster in clusters:
            if shapes_overlap(cluster, merged):
                result = merge_records(cluster, merged, mode)
                if isinstance(result, Conflict):
                    return result
                merged = result
            else:
                remaining.append(cluster)
        remaining.append(merged)
        clusters = remaining
    return clusters
