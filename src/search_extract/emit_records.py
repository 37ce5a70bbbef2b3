"""Build output rows from parsed search results."""

from __future__ import annotations

from typing import Any, Sequence

from search_extract.extract_entities import serialize_entities
from search_extract.models import EntityExtraction, FieldSpec, OutputShape, SearchResultItem

MENTIONS_KEY = "mentions"
HASHTAGS_KEY = "hashtags"

# Order and types of the fields appended to every input row.
ADDITIONAL_FIELD_TYPES = (
    "string",   # result id
    "string",   # result text
    "string",   # author id
    "integer",  # author friends count
    "string",   # decoded query
    "string",   # serialized mentions
    "string",   # serialized hashtags
)


def resolve_output_shape(
    input_fields: Sequence[FieldSpec],
    output_names: Sequence[str],
) -> OutputShape:
    """Append the declared additional fields to the input row's fields."""
    if len(output_names) != len(ADDITIONAL_FIELD_TYPES):
        raise ValueError(
            f"Expected {len(ADDITIONAL_FIELD_TYPES)} output field names, got {len(output_names)}"
        )
    additional = tuple(
        FieldSpec(name=name, type=field_type)
        for name, field_type in zip(output_names, ADDITIONAL_FIELD_TYPES)
    )
    return OutputShape(
        fields=tuple(input_fields) + additional,
        input_field_count=len(input_fields),
    )


def emit_record(
    item: SearchResultItem,
    extraction: EntityExtraction,
    shape: OutputShape,
    input_row: Sequence[Any] = (),
) -> list[Any]:
    """Build one output row for `item` laid out according to `shape`."""
    record: list[Any] = [None] * len(shape)

    for i, value in enumerate(input_row[:shape.input_field_count]):
        record[i] = value

    offset = shape.input_field_count
    record[offset:offset + len(ADDITIONAL_FIELD_TYPES)] = [
        item.id,
        item.text,
        item.author_id,
        item.author_friends_count,
        item.query,
        serialize_entities(MENTIONS_KEY, extraction.mentions),
        serialize_entities(HASHTAGS_KEY, extraction.hashtags),
    ]
    return record


def record_to_dict(shape: OutputShape, record: Sequence[Any]) -> dict[str, Any]:
    """Pair each value in `record` with its field name."""
    return dict(zip(shape.names, record, strict=True))
