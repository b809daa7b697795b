"""Least-upper-bound computation over derived types.

Strict unification widens numbers along int < long < double and otherwise
fails, handing irreconcilable record shapes to the union synthesizer.
Lenient unification never fails: collections of types are resolved by
majority vote, ties going to the type seen first.
"""

from typing import Callable, Dict, Hashable, List, Sequence

from avroderive.constants import NUMERIC_KINDS
from avroderive.errors import Conflict, TypeConflictError
from avroderive.renderer import render_schema_text
from avroderive.type_nodes import (NULL, ArrayType, DerivationMode,
                                   PrimitiveType, RecordType, TypeNode,
                                   UnionType, type_family)


def unify(a: TypeNode, b: TypeNode, mode: DerivationMode) -> TypeNode | Conflict:
    """Computes the least upper bound of two types.

    Args:
        a: First type
        b: Second type
        mode: Strict or lenient derivation

    Returns:
        The unified type, or a Conflict describing why there is none
    """
    if a == b:
        return a
    # null is neutral and never makes a type optional
    if a == NULL:
        return b
    if b == NULL:
        return a
    if isinstance(a, (RecordType, UnionType)) or isinstance(b, (RecordType, UnionType)):
        return unify_all([a, b], mode)
    if isinstance(a, PrimitiveType) and isinstance(b, PrimitiveType):
        return _unify_primitives(a, b, mode)
    if isinstance(a, ArrayType) and isinstance(b, ArrayType):
        items = unify(a.items, b.items, mode)
        if isinstance(items, Conflict):
            return items
        return ArrayType(items, a.name if a.name == b.name else None)
    return _type_conflict(a, b)


def _unify_primitives(a: PrimitiveType, b: PrimitiveType, mode: DerivationMode) -> TypeNode | Conflict:
    if a.is_numeric and b.is_numeric:
        return widest_numeric([a, b])
    if mode == DerivationMode.LENIENT:
        # booleans count as 0/1 and widen into the numeric side
        if a.kind == 'boolean' and b.is_numeric:
            return b
        if b.kind == 'boolean' and a.is_numeric:
            return a
    return _type_conflict(a, b)


def _type_conflict(a: TypeNode, b: TypeNode) -> Conflict:
    return Conflict(TypeConflictError(
        f"Cannot unify {render_schema_text(a)} with {render_schema_text(b)}"))


def widest_numeric(types: Sequence[PrimitiveType]) -> PrimitiveType:
    return max(types, key=lambda t: NUMERIC_KINDS.index(t.kind))


def unify_all(types: Sequence[TypeNode], mode: DerivationMode) -> TypeNode | Conflict:
    """Unifies the types of all elements of a collection.

    In strict mode records with overlapping shapes are merged field-wise and
    anything that still holds more than one shape is passed to the union
    synthesizer. In lenient mode the majority type wins.

    Args:
        types: Element types in document order
        mode: Strict or lenient derivation

    Returns:
        The element type, or a Conflict
    """
    if mode == DerivationMode.LENIENT:
        return resolve_majority(types)

    from avroderive.merger import cluster_records
    from avroderive.union_synthesis import synthesize_union

    candidates = [t for t in dict.fromkeys(types) if t != NULL]
    if not candidates:
        return NULL
    if not any(isinstance(t, (RecordType, UnionType)) for t in candidates):
        return fold_unify(candidates, mode)

    if all(isinstance(t, RecordType) for t in candidates):
        clusters = cluster_records(candidates, mode)
        if isinstance(clusters, Conflict):
            return clusters
        if len(clusters) == 1:
            return clusters[0]
    return synthesize_union(candidates)


def fold_unify(types: Sequence[TypeNode], mode: DerivationMode) -> TypeNode | Conflict:
    """Unifies types pairwise from left to right, stopping at the first conflict."""
    result = types[0]
    for t in types[1:]:
        result = unify(result, t, mode)
        if isinstance(result, Conflict):
            return result
    return result


def _majority(items: Sequence[TypeNode], key: Callable[[TypeNode], Hashable]) -> Hashable:
    counts: Dict[Hashable, int] = {}
    for item in items:
        k = key(item)
        counts[k] = counts.get(k, 0) + 1
    # max() keeps the first of equal counts, i.e. the earliest occurrence
    return max(counts, key=counts.get)


def resolve_majority(types: Sequence[TypeNode]) -> TypeNode:
    """Picks the most frequent type of a collection (lenient mode).

    Nulls are ignored. Types are bucketed into families (boolean, number,
    string, array, record) and the largest family wins. Numbers widen to the
    widest kind, arrays resolve their item types, and records keep the most
    frequent field-name set, resolving each field across the records that
    have that set.

    Args:
        types: Types in document order

    Returns:
        The resolved type; never a union
    """
    candidates = [t for t in types if t != NULL]
    if not candidates:
        return NULL
    family = _majority(candidates, type_family)
    members: List = [t for t in candidates if type_family(t) == family]
    if family == 'number':
        return widest_numeric(members)
    if family == 'array':
        return ArrayType(resolve_majority([m.items for m in members]), members[0].name)
    if family == 'record':
        shape = _majority(members, lambda r: r.field_names)
        group = [m for m in members if m.field_names == shape]
        fields = {name: resolve_majority([m.field_map()[name] for m in group])
                  for name in shape}
        return RecordType.create(group[0].name, fields)
    return members[0]
