"""Derives Avro schemas from sample JSON messages.

This module provides the entry points used by:
- derive: Derive the schema of a single JSON document
- derive-multi: Derive ranked schemas for a batch of messages
"""

from typing import Any, Dict, List, Sequence

from avroderive.aggregator import derive_schemas_for_messages as _derive_for_messages
from avroderive.constants import (DEFAULT_RECORD_NAME, MAX_DERIVATION_DEPTH,
                                  MAX_RANKED_SCHEMAS, MESSAGE_RECORD_NAME)
from avroderive.errors import Conflict
from avroderive.merger import derive_type
from avroderive.renderer import (AvroSchema, dump_schema_text,
                                 render_schema_text, to_avro_schema)
from avroderive.type_nodes import DerivationMode, TypeNode


class AvroSchemaDeriver:
    """Derives Avro schemas from JSON values."""

    def __init__(self, strict: bool = True, max_depth: int = MAX_DERIVATION_DEPTH):
        """Initialize the schema deriver.

        Args:
            strict: Fail on ambiguous types (True) or widen by majority (False)
            max_depth: Maximum nesting depth of a document
        """
        self.mode = DerivationMode.from_flag(not strict)
        self.max_depth = max_depth

    def derive_type_tree(self, value: Any, type_name: str = DEFAULT_RECORD_NAME) -> TypeNode:
        """Derives the internal type tree of a parsed JSON value.

        Raises:
            DeriveSchemaError: If no schema can represent the value
        """
        result = derive_type(value, type_name, self.mode, max_depth=self.max_depth)
        if isinstance(result, Conflict):
            result.raise_error()
        return result

    def get_schema_for_record(self, value: Any, type_name: str = DEFAULT_RECORD_NAME) -> AvroSchema:
        """Derives the Avro schema of one parsed JSON document.

        Args:
            value: Parsed JSON value, usually an object
            type_name: Name for the top-level record

        Returns:
            The Avro schema structure
        """
        return to_avro_schema(self.derive_type_tree(value, type_name))

    def get_schema_text_for_record(self, value: Any, type_name: str = DEFAULT_RECORD_NAME) -> str:
        """Derives the canonical schema text of one parsed JSON document."""
        return render_schema_text(self.derive_type_tree(value, type_name))

    def get_schema_for_multiple_messages(self, messages: Sequence[Any],
                                         max_schemas: int = MAX_RANKED_SCHEMAS) -> List[Dict[str, Any]]:
        """Derives ranked schemas for a batch of messages.

        Args:
            messages: JSON texts or parsed values
            max_schemas: Number of ranked schemas returned in strict mode

        Returns:
            Ranked schema entries
        """
        return _derive_for_messages(messages, self.mode, MESSAGE_RECORD_NAME,
                                    max_schemas, self.max_depth)

    def get_schema_text_for_multiple_messages(self, messages: Sequence[Any],
                                              max_schemas: int = MAX_RANKED_SCHEMAS) -> List[str]:
        """Derives ranked schema entries rendered as canonical text."""
        return [dump_schema_text(entry)
                for entry in self.get_schema_for_multiple_messages(messages, max_schemas)]


# Convenience functions for direct use

def derive_schema_for_record(
    value: Any,
    type_name: str = DEFAULT_RECORD_NAME,
    mode: DerivationMode = DerivationMode.STRICT
) -> AvroSchema:
    """Derives the Avro schema of a parsed JSON document.

    Args:
        value: Parsed JSON value
        type_name: Name for the top-level record
        mode: Strict or lenient derivation

    Returns:
        Derived Avro schema
    """
    deriver = AvroSchemaDeriver(strict=DerivationMode(mode) == DerivationMode.STRICT)
    return deriver.get_schema_for_record(value, type_name)


def derive_schema_for_messages(
    messages: Sequence[Any],
    mode: DerivationMode = DerivationMode.STRICT,
    max_schemas: int = MAX_RANKED_SCHEMAS
) -> List[Dict[str, Any]]:
    """Derives ranked Avro schemas for a batch of messages.

    Args:
        messages: JSON texts or parsed values
        mode: Strict or lenient derivation
        max_schemas: Number of ranked schemas returned in strict mode

    Returns:
        Ranked schema entries
    """
    deriver = AvroSchemaDeriver(strict=DerivationMode(mode) == DerivationMode.STRICT)
    return deriver.get_schema_for_multiple_messages(messages, max_schemas)
