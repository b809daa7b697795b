"""Derives schemas for batches of messages and ranks the distinct results.

Every message is derived on its own. Messages that yield the same schema
form a match group; groups are ranked by size, ties going to the group whose
first message came earlier. A message that cannot be derived is reported as
unmatched and never affects the others.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from avroderive.constants import (MAX_DERIVATION_DEPTH, MAX_RANKED_SCHEMAS,
                                  MESSAGE_RECORD_NAME)
from avroderive.errors import (Conflict, DeriveSchemaError,
                               NestingDepthError, NoSchemaDerivedError)
from avroderive.merger import derive_type
from avroderive.renderer import render_schema_text, to_avro_schema
from avroderive.type_nodes import DerivationMode, TypeNode, same_shape
from avroderive.unifier import unify

logger = logging.getLogger(__name__)


@dataclass
class DocumentResult:
    """Outcome of deriving one message of a batch."""
    index: int
    schema: Optional[TypeNode] = None
    error: Optional[DeriveSchemaError] = None

    @property
    def matched(self) -> bool:
        return self.schema is not None


@dataclass
class MatchGroup:
    """Messages that share one derived schema."""
    schema: TypeNode
    messages_matched: List[int] = field(default_factory=list)

    @property
    def schema_text(self) -> str:
        return render_schema_text(self.schema)

    @property
    def num_messages_matched(self) -> int:
        return len(self.messages_matched)

    def to_dict(self, include_matches: bool = True) -> Dict[str, Any]:
        result: Dict[str, Any] = {"schema": to_avro_schema(self.schema)}
        if include_matches:
            result["messagesMatched"] = list(self.messages_matched)
            result["numMessagesMatched"] = self.num_messages_matched
        return result


def derive_document(index: int, message: Any, mode: DerivationMode,
                    type_name: str = MESSAGE_RECORD_NAME,
                    max_depth: int = MAX_DERIVATION_DEPTH) -> DocumentResult:
    """Derives the schema of a single message of a batch.

    Args:
        index: Position of the message in the batch
        message: JSON text, or an already parsed value
        mode: Strict or lenient derivation
        type_name: Name of the top-level record
        max_depth: Maximum nesting depth of a message

    Returns:
        The result; parse and derivation failures are carried, not raised
    """
    if isinstance(message, (str, bytes)):
        try:
            value = json.loads(message)
        except RecursionError:
            logger.warning("Message %d nests too deeply to be parsed", index)
            return DocumentResult(index, error=NestingDepthError(
                f"Message {index} nests too deeply to be parsed"))
        except ValueError as e:
            logger.warning("Message %d is not valid JSON: %s", index, e)
            return DocumentResult(index, error=DeriveSchemaError(f"Invalid JSON: {e}"))
    else:
        value = message
    result = derive_type(value, type_name, mode, max_depth=max_depth)
    if isinstance(result, Conflict):
        logger.warning("No schema derived for message %d: %s", index, result.error)
        return DocumentResult(index, error=result.error)
    return DocumentResult(index, schema=result)


def group_results(results: Sequence[DocumentResult], mode: DerivationMode) -> List[MatchGroup]:
    """Groups matched messages by schema.

    Messages with identical rendered schemas share a group. Groups whose
    schemas have the same shape and differ only in numeric width are then
    coalesced into one group carrying the widened schema.

    Args:
        results: Per-message results in batch order
        mode: Strict or lenient derivation

    Returns:
        Groups in order of their first message
    """
    by_text: Dict[str, MatchGroup] = {}
    for result in sorted(results, key=lambda r: r.index):
        if not result.matched:
            continue
        text = render_schema_text(result.schema)
        if text not in by_text:
            by_text[text] = MatchGroup(result.schema)
        by_text[text].messages_matched.append(result.index)

    groups: List[MatchGroup] = []
    for group in by_text.values():
        for existing in groups:
            if not same_shape(existing.schema, group.schema):
                continue
            widened = unify(existing.schema, group.schema, mode)
            if isinstance(widened, Conflict):
                continue
            logger.debug("Coalescing %s into %s", group.schema_text, existing.schema_text)
            existing.schema = widened
            existing.messages_matched = sorted(existing.messages_matched + group.messages_matched)
            break
        else:
            groups.append(group)
    return groups


def rank_groups(groups: Sequence[MatchGroup]) -> List[MatchGroup]:
    """Orders groups by size, largest first; ties go to the earliest first message."""
    return sorted(groups, key=lambda g: (-g.num_messages_matched, g.messages_matched[0]))


def derive_schemas_for_messages(messages: Sequence[Any],
                                mode: DerivationMode = DerivationMode.STRICT,
                                type_name: str = MESSAGE_RECORD_NAME,
                                max_schemas: int = MAX_RANKED_SCHEMAS,
                                max_depth: int = MAX_DERIVATION_DEPTH) -> List[Dict[str, Any]]:
    """Derives representative schemas for a batch of messages.

    Strict mode returns up to `max_schemas` ranked entries of the form
    {"schema", "messagesMatched", "numMessagesMatched"}. Lenient mode returns
    a single entry {"schema"} for the top-ranked group.

    Args:
        messages: JSON texts or parsed values, one per message
        mode: Strict or lenient derivation
        type_name: Name of the top-level record
        max_schemas: Number of ranked schemas returned in strict mode
        max_depth: Maximum nesting depth of a message

    Returns:
        Ranked schema entries

    Raises:
        NoSchemaDerivedError: If no message produced a schema
    """
    results = [derive_document(index, message, mode, type_name, max_depth)
               for index, message in enumerate(messages)]
    ranked = rank_groups(group_results(results, mode))
    unmatched = sum(1 for r in results if not r.matched)
    logger.debug("Derived %d schema group(s) from %d message(s), %d unmatched",
                 len(ranked), len(results), unmatched)
    if not ranked:
        raise NoSchemaDerivedError(
            f"No schema could be derived from any of the {len(results)} message(s)")
    if mode == DerivationMode.LENIENT:
        return [ranked[0].to_dict(include_matches=False)]
    return [group.to_dict() for group in ranked[:max_schemas]]
