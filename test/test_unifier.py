"""Tests for type unification and lenient majority resolution."""

import itertools
import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from avroderive.errors import (Conflict, InvalidStructureError,
                               TypeConflictError)
from avroderive.type_nodes import (BOOLEAN, DOUBLE, INT, LONG, NULL, STRING,
                                   ArrayType, DerivationMode, RecordType,
                                   UnionType)
from avroderive.unifier import resolve_majority, unify, unify_all

STRICT = DerivationMode.STRICT
LENIENT = DerivationMode.LENIENT


def record(name, **fields):
    return RecordType.create(name, fields)


class TestUnifyPrimitives(unittest.TestCase):
    """Test cases for unify() on primitive types."""

    def test_identical(self):
        for t in (NULL, BOOLEAN, INT, LONG, DOUBLE, STRING):
            self.assertEqual(unify(t, t, STRICT), t)

    def test_numeric_widening(self):
        self.assertEqual(unify(INT, LONG, STRICT), LONG)
        self.assertEqual(unify(INT, DOUBLE, STRICT), DOUBLE)
        self.assertEqual(unify(LONG, DOUBLE, STRICT), DOUBLE)

    def test_widening_never_narrows(self):
        self.assertEqual(unify(INT, unify(LONG, DOUBLE, STRICT), STRICT), DOUBLE)
        self.assertEqual(unify(unify(INT, LONG, STRICT), INT, STRICT), LONG)
        self.assertEqual(unify(DOUBLE, unify(INT, INT, STRICT), STRICT), DOUBLE)

    def test_null_is_neutral(self):
        for t in (BOOLEAN, INT, STRING, ArrayType(INT), record('r', a=INT)):
            self.assertEqual(unify(NULL, t, STRICT), t)
            self.assertEqual(unify(t, NULL, LENIENT), t)

    def test_string_conflicts(self):
        for mode in (STRICT, LENIENT):
            for other in (BOOLEAN, INT, LONG, DOUBLE, ArrayType(STRING)):
                result = unify(STRING, other, mode)
                self.assertIsInstance(result, Conflict)
                self.assertIsInstance(result.error, TypeConflictError)

    def test_boolean_and_numbers(self):
        self.assertIsInstance(unify(BOOLEAN, INT, STRICT), Conflict)
        self.assertIsInstance(unify(DOUBLE, BOOLEAN, STRICT), Conflict)
        self.assertEqual(unify(BOOLEAN, DOUBLE, LENIENT), DOUBLE)
        self.assertEqual(unify(LONG, BOOLEAN, LENIENT), LONG)


class TestUnifyComplex(unittest.TestCase):
    """Test cases for unify() on arrays and records."""

    def test_arrays(self):
        self.assertEqual(unify(ArrayType(INT), ArrayType(DOUBLE), STRICT), ArrayType(DOUBLE))
        self.assertEqual(unify(ArrayType(ArrayType(INT)), ArrayType(ArrayType(LONG)), STRICT),
                         ArrayType(ArrayType(LONG)))
        self.assertIsInstance(unify(ArrayType(INT), ArrayType(BOOLEAN), STRICT), Conflict)

    def test_array_and_primitive_conflict(self):
        for mode in (STRICT, LENIENT):
            self.assertIsInstance(unify(ArrayType(INT), INT, mode), Conflict)

    def test_overlapping_records_merge(self):
        a = record('r', K=INT)
        b = record('r', K=DOUBLE, J=STRING)
        self.assertEqual(unify(a, b, STRICT), record('r', J=STRING, K=DOUBLE))

    def test_shared_field_conflict(self):
        result = unify(record('r', J=ArrayType(INT)), record('r', J=ArrayType(BOOLEAN)), STRICT)
        self.assertIsInstance(result, Conflict)
        self.assertIsInstance(result.error, InvalidStructureError)
        self.assertEqual(result.error.field_name, 'J')

    def test_tagged_wrappers_become_union(self):
        result = unify(record('r', array=ArrayType(INT)), record('r', long=INT), STRICT)
        self.assertEqual(result, UnionType.create([LONG, ArrayType(INT, 'array')]))

    def test_disjoint_plain_records_conflict(self):
        result = unify(record('r', K=INT), record('r', J=INT), STRICT)
        self.assertIsInstance(result, Conflict)
        self.assertIsInstance(result.error, TypeConflictError)

    def test_lenient_records_resolve_by_majority(self):
        self.assertEqual(unify(record('r', J=BOOLEAN), record('r', J=BOOLEAN), LENIENT),
                         record('r', J=BOOLEAN))
        self.assertEqual(unify(record('r', J=INT, K=INT), record('r', J=INT), LENIENT),
                         record('r', J=INT, K=INT))


class TestCommutativity(unittest.TestCase):
    """unify(a, b) and unify(b, a) agree in strict mode."""

    TYPES = [
        NULL, BOOLEAN, INT, LONG, DOUBLE, STRING,
        ArrayType(INT), ArrayType(DOUBLE), ArrayType(STRING),
        record('r', K=INT), record('r', K=DOUBLE, J=STRING), record('r', J=BOOLEAN),
        record('r', long=INT), record('r', array=ArrayType(INT)), record('r', M=INT),
    ]

    def test_commutative(self):
        for a, b in itertools.combinations(self.TYPES, 2):
            ab = unify(a, b, STRICT)
            ba = unify(b, a, STRICT)
            if isinstance(ab, Conflict):
                self.assertIsInstance(ba, Conflict, f"{a} / {b}")
                self.assertIs(type(ab.error), type(ba.error), f"{a} / {b}")
            else:
                self.assertEqual(ab, ba, f"{a} / {b}")

    def test_lenient_primitives_commutative(self):
        primitives = [NULL, BOOLEAN, INT, LONG, DOUBLE, STRING, ArrayType(INT), ArrayType(DOUBLE)]
        for a, b in itertools.combinations(primitives, 2):
            ab = unify(a, b, LENIENT)
            ba = unify(b, a, LENIENT)
            if isinstance(ab, Conflict):
                self.assertIsInstance(ba, Conflict)
            else:
                self.assertEqual(ab, ba)


class TestUnifyAll(unittest.TestCase):
    """Test cases for unify_all()."""

    def test_strict_fold(self):
        self.assertEqual(unify_all([INT, DOUBLE, INT], STRICT), DOUBLE)
        self.assertEqual(unify_all([INT, LONG], STRICT), LONG)
        self.assertEqual(unify_all([NULL, NULL], STRICT), NULL)
        self.assertEqual(unify_all([NULL, STRING], STRICT), STRING)
        self.assertIsInstance(unify_all([INT, STRING], STRICT), Conflict)

    def test_strict_records(self):
        records = [record('A', K=INT), record('A', K=DOUBLE), record('A', K=DOUBLE)]
        self.assertEqual(unify_all(records, STRICT), record('A', K=DOUBLE))

    def test_strict_record_and_primitive(self):
        self.assertEqual(unify_all([INT, record('A', x=STRING)], STRICT),
                         UnionType.create([INT, record('A', x=STRING)]))


class TestResolveMajority(unittest.TestCase):
    """Test cases for resolve_majority()."""

    def test_empty_and_null(self):
        self.assertEqual(resolve_majority([]), NULL)
        self.assertEqual(resolve_majority([NULL, NULL]), NULL)

    def test_family_majority(self):
        # [0, 1, true, true, true, null]
        self.assertEqual(resolve_majority([INT, INT, BOOLEAN, BOOLEAN, BOOLEAN, NULL]), BOOLEAN)
        # [0, "Java", 10, 100, -12, 11221]
        self.assertEqual(resolve_majority([INT, STRING, INT, INT, INT, INT]), INT)
        # [null, "Java", 10, 100, "C++", "Scala"]
        self.assertEqual(resolve_majority([NULL, STRING, INT, INT, STRING, STRING]), STRING)

    def test_numbers_widen(self):
        self.assertEqual(resolve_majority([INT, LONG, BOOLEAN]), LONG)
        self.assertEqual(resolve_majority([BOOLEAN, DOUBLE, INT]), DOUBLE)

    def test_ties_go_to_first_occurrence(self):
        self.assertEqual(resolve_majority([DOUBLE, BOOLEAN]), DOUBLE)
        self.assertEqual(resolve_majority([BOOLEAN, DOUBLE]), BOOLEAN)

    def test_arrays_resolve_items(self):
        arrays = [ArrayType(INT), ArrayType(STRING), ArrayType(STRING)]
        self.assertEqual(resolve_majority(arrays), ArrayType(STRING))

    def test_records_keep_majority_shape(self):
        records = [
            record('R', Int1=DOUBLE, Int2=DOUBLE),
            record('R', Int1=DOUBLE, Int2=INT),
            record('R', Int1=BOOLEAN, Int3=INT),
        ]
        self.assertEqual(resolve_majority(records), record('R', Int1=DOUBLE, Int2=DOUBLE))

    def test_records_resolve_fields(self):
        records = [
            record('R', Int1=BOOLEAN, Int2=BOOLEAN),
            record('R', Int1=DOUBLE, Int2=INT),
            record('R', Int1=DOUBLE, Int2=INT),
        ]
        self.assertEqual(resolve_majority(records), record('R', Int1=DOUBLE, Int2=INT))


if __name__ == '__main__':
    unittest.main()
