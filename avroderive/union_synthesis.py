"""Strict-mode union synthesis for shapes that cannot be merged.

Records whose shapes are disjoint can only share a union when each of them is
a tagged wrapper, i.e. an object with a single key naming the branch its value
belongs to, the way Avro encodes union values in JSON (`{"long": 12}`,
`{"array": [12]}`). Wrappers are unpacked into their branch. A single record
shape next to primitives or arrays becomes a record branch of its own.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from avroderive.constants import PRIMITIVE_KINDS
from avroderive.errors import Conflict, TypeConflictError
from avroderive.merger import cluster_records
from avroderive.renderer import render_schema_text
from avroderive.type_nodes import (NULL, ArrayType, DerivationMode,
                                   PrimitiveType, RecordType, TypeNode,
                                   UnionType, branch_key)
from avroderive.unifier import fold_unify, unify

logger = logging.getLogger(__name__)


def unwrap_tagged(record: RecordType) -> Optional[TypeNode]:
    """Returns the branch a tagged wrapper record stands for.

    Args:
        record: Candidate wrapper

    Returns:
        The unpacked branch, or None if the record is not a tagged wrapper
    """
    if len(record.fields) != 1:
        return None
    tag, value_type = record.fields[0]
    if isinstance(value_type, PrimitiveType):
        if tag not in PRIMITIVE_KINDS:
            return None
        branch = PrimitiveType(tag)
        widened = unify(value_type, branch, DerivationMode.STRICT)
        return branch if widened == branch else None
    if isinstance(value_type, ArrayType):
        return ArrayType(value_type.items, name=tag)
    if isinstance(value_type, RecordType):
        # nested records are already named after their field
        return value_type
    return None


def _branch_slot(branch: TypeNode) -> Tuple[str, str]:
    # numeric kinds share one branch and widen into each other
    if isinstance(branch, PrimitiveType) and branch.is_numeric:
        return ('primitive', 'number')
    return branch_key(branch)


def _add_branch(branches: Dict[Tuple[str, str], TypeNode], branch: TypeNode) -> Optional[Conflict]:
    key = _branch_slot(branch)
    if key not in branches:
        branches[key] = branch
        return None
    if type(branches[key]) is not type(branch):
        return Conflict(TypeConflictError(
            f"Union branches {render_schema_text(branches[key])} and "
            f"{render_schema_text(branch)} share the name '{key[1]}'"))
    merged = unify(branches[key], branch, DerivationMode.STRICT)
    if isinstance(merged, Conflict):
        return Conflict(TypeConflictError(
            f"Union branches {render_schema_text(branches[key])} and "
            f"{render_schema_text(branch)} cannot be combined ({merged.error.message})"))
    if isinstance(merged, UnionType):
        return Conflict(TypeConflictError(
            f"Union branch {render_schema_text(branch)} would nest a union"))
    branches[key] = merged
    return None


def synthesize_union(candidates: Sequence[TypeNode]) -> TypeNode | Conflict:
    """Builds a union from types that could not be unified (strict mode).

    Args:
        candidates: Types to combine; unions among them are flattened

    Returns:
        The union (or the single remaining branch), or a Conflict. Records
        sharing a field with incompatible types yield InvalidStructureError;
        disjoint records that are not tagged wrappers yield TypeConflictError.
    """
    flat: List[TypeNode] = []
    plain: List[TypeNode] = []
    for candidate in candidates:
        if isinstance(candidate, UnionType):
            flat.extend(candidate.branches)
        elif isinstance(candidate, RecordType):
            flat.append(candidate)
        elif candidate != NULL:
            plain.append(candidate)
    # plain primitives and arrays must unify; only unpacked wrappers add branches
    if plain:
        folded = fold_unify(plain, DerivationMode.STRICT)
        if isinstance(folded, Conflict):
            return folded
        flat.append(folded)

    records = [c for c in flat if isinstance(c, RecordType)]
    others = [c for c in flat if not isinstance(c, RecordType)]
    clusters = cluster_records(records, DerivationMode.STRICT)
    if isinstance(clusters, Conflict):
        return clusters

    branches: Dict[Tuple[str, str], TypeNode] = {}
    for other in others:
        conflict = _add_branch(branches, other)
        if conflict:
            return conflict

    if len(clusters) > 1:
        for record in clusters:
            branch = unwrap_tagged(record)
            if branch is None:
                fields = ', '.join(sorted(record.field_names))
                return Conflict(TypeConflictError(
                    f"Record '{record.name}' with fields [{fields}] cannot be told apart "
                    f"from the other shapes in a union"))
            conflict = _add_branch(branches, branch)
            if conflict:
                return conflict
    elif clusters:
        record = clusters[0]
        branch = unwrap_tagged(record)
        # a wrapper joins an existing branch, any other record stands on its own
        if branch is None or _branch_slot(branch) not in branches:
            branch = record
        conflict = _add_branch(branches, branch)
        if conflict:
            return conflict

    if not branches:
        return NULL
    if len(branches) == 1:
        return next(iter(branches.values()))
    union = UnionType.create(branches.values())
    logger.debug("Synthesized union %s", render_schema_text(union))
    return union
