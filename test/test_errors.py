"""Tests for derivation errors and conflict results."""

import os
import sys
import unittest

current_script_path = os.path.abspath(__file__)
project_root = os.path.dirname(os.path.dirname(current_script_path))
sys.path.append(project_root)

from avroderive.errors import (Conflict, DeriveSchemaError,
                               InvalidStructureError, RangeError)
from avroderive.type_nodes import DerivationMode


class TestErrors(unittest.TestCase):

    def test_message_with_path(self):
        error = RangeError("Integer out of range")
        self.assertEqual(str(error), "Integer out of range")
        error.path = "record.a"
        self.assertEqual(str(error), "Integer out of range at record.a")
        self.assertIsInstance(error, DeriveSchemaError)

    def test_conflict_keeps_deepest_path(self):
        conflict = Conflict(RangeError("Integer out of range"))
        self.assertIs(conflict.at("record.a.b"), conflict)
        conflict.at("record.a")
        self.assertEqual(conflict.error.path, "record.a.b")

    def test_raise_error(self):
        conflict = Conflict(InvalidStructureError("Field 'J' differs", "J"))
        with self.assertRaises(InvalidStructureError) as ctx:
            conflict.raise_error()
        self.assertEqual(ctx.exception.field_name, "J")

    def test_mode_from_flag(self):
        self.assertEqual(DerivationMode.from_flag(True), DerivationMode.LENIENT)
        self.assertEqual(DerivationMode.from_flag(False), DerivationMode.STRICT)
        self.assertEqual(DerivationMode('lenient'), DerivationMode.LENIENT)


if __name__ == '__main__':
    unittest.main()
