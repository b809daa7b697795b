"""Derives Avro schemas from JSON files.

This module provides:
- derive: Derive the Avro schema of a single JSON document
- derive-multi: Derive ranked Avro schemas from a file of messages
"""

import json
import logging
import os
from typing import Any, List

from avroderive.constants import DEFAULT_RECORD_NAME, MAX_RANKED_SCHEMAS
from avroderive.derive_schema import AvroSchemaDeriver

logger = logging.getLogger(__name__)


def convert_record_to_avro(
    json_file: str,
    avro_schema_file: str,
    type_name: str = DEFAULT_RECORD_NAME,
    lenient: bool = False
) -> None:
    """Derives the Avro schema of a single JSON document.

    Args:
        json_file: Path of the JSON document
        avro_schema_file: Output path for the Avro schema
        type_name: Name for the top-level record
        lenient: Widen conflicting types by majority instead of failing
    """
    with open(json_file, 'r', encoding='utf-8') as f:
        value = json.load(f)

    deriver = AvroSchemaDeriver(strict=not lenient)
    schema = deriver.get_schema_for_record(value, type_name or DEFAULT_RECORD_NAME)
    _write_json(avro_schema_file, schema)


def convert_messages_to_avro(
    input_files: List[str] | str,
    avro_schema_file: str,
    lenient: bool = False,
    max_schemas: int = MAX_RANKED_SCHEMAS
) -> None:
    """Derives ranked Avro schemas from files of JSON messages.

    Strict mode writes up to `max_schemas` entries, each with the schema, the
    indices of the messages it matches and their count. Lenient mode writes a
    single entry with the best-effort schema.

    Args:
        input_files: Message file path(s)
        avro_schema_file: Output path for the schema entries
        lenient: Widen conflicting types by majority instead of failing
        max_schemas: Number of ranked schemas written in strict mode
    """
    if isinstance(input_files, str):
        input_files = [input_files]
    if not input_files:
        raise ValueError("At least one input file is required")

    messages = load_messages(input_files)
    if not messages:
        raise ValueError("No messages found in input files")

    deriver = AvroSchemaDeriver(strict=not lenient)
    entries = deriver.get_schema_for_multiple_messages(messages, max_schemas)
    _write_json(avro_schema_file, entries)


def load_messages(input_files: List[str]) -> List[Any]:
    """Loads messages from files.

    A file holding one JSON document contributes one message, or one message
    per element when the document is an array. Any other file is read as
    JSON Lines, one message per non-empty line; lines that do not parse are
    kept as text so that they are reported as unmatched messages.

    Args:
        input_files: List of file paths

    Returns:
        Parsed messages, or raw text for lines that are not valid JSON
    """
    messages: List[Any] = []

    for file_path in input_files:
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read().strip()

        if not content:
            continue

        try:
            data = json.loads(content)
            if isinstance(data, list):
                messages.extend(data)
            else:
                messages.append(data)
            continue
        except json.JSONDecodeError:
            logger.debug("%s is not a single JSON document, reading as JSON Lines", file_path)

        for line in content.split('\n'):
            line = line.strip()
            if not line:
                continue
            try:
                messages.append(json.loads(line))
            except json.JSONDecodeError:
                messages.append(line)

    return messages


def _write_json(output_file: str, data: Any) -> None:
    # Ensure output directory exists
    output_dir = os.path.dirname(output_file)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir)

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
