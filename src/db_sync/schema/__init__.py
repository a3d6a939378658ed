"""Relation models, name filtering, DDL helpers, and metadata resolution.

Usage:
    from db_sync.schema import SchemaResolver, discover, is_in_scope
    from db_sync.schema import RelationDescriptor, RelationKind, ColumnInfo
"""

from db_sync.schema.ddl import quote_identifier, synthesize_create_statement
from db_sync.schema.filters import is_in_scope, match_pattern
from db_sync.schema.models import ColumnInfo, RelationDescriptor, RelationKind
from db_sync.schema.resolver import SchemaResolver, discover

__all__ = [
    "ColumnInfo",
    "RelationDescriptor",
    "RelationKind",
    "is_in_scope",
    "match_pattern",
    "quote_identifier",
    "synthesize_create_statement",
    "SchemaResolver",
    "discover",
]
