"""Relationship-graph integrity engine for family tree records."""

from kinship.config import EngineConfig, load_config
from kinship.direction import reciprocal_type, resolve_direction
from kinship.engine import RelationshipEngine
from kinship.errors import IssueKind, StoreError, ValidationIssue
from kinship.models import (
    Member,
    MutationResult,
    RelationshipEdge,
    RelationshipRequest,
    RelationType,
    SiblingType,
    ValidationResult,
)

__all__ = [
    "EngineConfig",
    "IssueKind",
    "Member",
    "MutationResult",
    "RelationType",
    "RelationshipEdge",
    "RelationshipEngine",
    "RelationshipRequest",
    "SiblingType",
    "StoreError",
    "ValidationIssue",
    "ValidationResult",
    "load_config",
    "reciprocal_type",
    "resolve_direction",
]
