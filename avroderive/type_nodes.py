"""Internal type tree built while deriving a schema.

The nodes are immutable and compare structurally, so two derivations of the
same shape produce equal trees regardless of the order in which fields were
encountered.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple, Union

from avroderive.constants import NUMERIC_KINDS, PRIMITIVE_KINDS


class DerivationMode(str, Enum):
    """Conflict policy of a derivation call."""
    STRICT = 'strict'
    LENIENT = 'lenient'

    @classmethod
    def from_flag(cls, lenient: bool) -> 'DerivationMode':
        return cls.LENIENT if lenient else cls.STRICT


@dataclass(frozen=True)
class PrimitiveType:
    kind: str

    def __post_init__(self):
        if self.kind not in PRIMITIVE_KINDS:
            raise ValueError(f"Unknown primitive kind: {self.kind}")

    @property
    def is_numeric(self) -> bool:
        return self.kind in NUMERIC_KINDS


@dataclass(frozen=True)
class ArrayType:
    items: 'TypeNode'
    # only set on a union branch unpacked from a tagged wrapper
    name: Optional[str] = None


@dataclass(frozen=True)
class RecordType:
    name: str
    fields: Tuple[Tuple[str, 'TypeNode'], ...] = ()

    @classmethod
    def create(cls, name: str, fields: Dict[str, 'TypeNode']) -> 'RecordType':
        """Creates a record with its fields sorted by name."""
        return cls(name, tuple(sorted(fields.items(), key=lambda f: f[0])))

    @property
    def field_names(self) -> frozenset:
        return frozenset(name for name, _ in self.fields)

    def field_map(self) -> Dict[str, 'TypeNode']:
        return dict(self.fields)


@dataclass(frozen=True)
class UnionType:
    branches: Tuple['TypeNode', ...]

    @classmethod
    def create(cls, branches: Iterable['TypeNode']) -> 'UnionType':
        """Creates a union with flattened branches in rendering order."""
        flat = []
        for branch in branches:
            if isinstance(branch, UnionType):
                flat.extend(branch.branches)
            else:
                flat.append(branch)
        return cls(tuple(sorted(flat, key=branch_sort_key)))


TypeNode = Union[PrimitiveType, ArrayType, RecordType, UnionType]

NULL = PrimitiveType('null')
BOOLEAN = PrimitiveType('boolean')
INT = PrimitiveType('int')
LONG = PrimitiveType('long')
DOUBLE = PrimitiveType('double')
STRING = PrimitiveType('string')


def branch_key(node: TypeNode) -> Tuple[str, str]:
    """Identity of a union branch; a union holds at most one branch per key."""
    if isinstance(node, PrimitiveType):
        return ('primitive', node.kind)
    if isinstance(node, ArrayType) and node.name is None:
        return ('array', '')
    if isinstance(node, (ArrayType, RecordType)):
        return ('named', node.name)
    raise TypeError(f"Unions cannot nest: {node!r}")


def branch_sort_key(node: TypeNode) -> Tuple[int, str]:
    """Primitive keywords first, then the unnamed array, then names."""
    group, name = branch_key(node)
    if group == 'primitive':
        return (0, name)
    if group == 'array':
        return (1, name)
    return (2, name)


def type_family(node: TypeNode) -> str:
    """Coarse classification used by majority resolution."""
    if isinstance(node, PrimitiveType):
        return 'number' if node.is_numeric else node.kind
    if isinstance(node, ArrayType):
        return 'array'
    if isinstance(node, RecordType):
        return 'record'
    return 'union'


def same_shape(a: TypeNode, b: TypeNode) -> bool:
    """Checks whether two trees differ at most in the width of numeric kinds."""
    if isinstance(a, PrimitiveType) and isinstance(b, PrimitiveType):
        return a == b or (a.is_numeric and b.is_numeric)
    if isinstance(a, ArrayType) and isinstance(b, ArrayType):
        return a.name == b.name and same_shape(a.items, b.items)
    if isinstance(a, RecordType) and isinstance(b, RecordType):
        if a.name != b.name or a.field_names != b.field_names:
            return False
        return all(same_shape(ta, tb) for (_, ta), (_, tb) in zip(a.fields, b.fields))
    if isinstance(a, UnionType) and isinstance(b, UnionType):
        return len(a.branches) == len(b.branches) and all(
            same_shape(x, y) for x, y in zip(a.branches, b.branches))
    return False
