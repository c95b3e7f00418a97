"""Schema validation for seed content."""

from .validate import build_record_validator, load_collection_schemas, load_schema, validate_records

__all__ = [
    "build_record_validator",
    "load_collection_schemas",
    "load_schema",
    "validate_records",
]
