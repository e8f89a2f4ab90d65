"""Data classes for family members, relationship edges and engine results."""

from dataclasses import dataclass, field
from enum import Enum

from kinship.errors import ValidationIssue


class RelationType(str, Enum):
    PARENT = "parent"
    CHILD = "child"
    SPOUSE = "spouse"
    SIBLING = "sibling"


class SiblingType(str, Enum):
    FULL = "full"
    HALF = "half"
    UNKNOWN = "unknown"  # persisted as NULL


@dataclass
class Member:
    id: str
    first_name: str
    last_name: str
    birth_date: str | None = None  # ISO format YYYY-MM-DD, or free text
    gender: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in [self.first_name, self.last_name] if p)


@dataclass
class MemberName:
    first_name: str
    last_name: str


@dataclass
class RelationshipEdge:
    id: str
    from_member_id: str
    to_member_id: str
    relation_type: RelationType
    sibling_type: SiblingType | None = None
    metadata: dict | None = None
    created_at: str | None = None


@dataclass
class RelationshipRequest:
    from_member_id: str
    to_member_id: str
    relation_type: RelationType
    metadata: dict | None = None  # marriage_date, divorce_date, notes


@dataclass
class RelationshipDirection:
    from_member_id: str
    to_member_id: str
    relation_type: RelationType
    current_role: RelationType
    selected_role: RelationType

    def to_request(self, metadata: dict | None = None) -> RelationshipRequest:
        return RelationshipRequest(
            from_member_id=self.from_member_id,
            to_member_id=self.to_member_id,
            relation_type=self.relation_type,
            metadata=metadata,
        )


@dataclass
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    suggestions: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_message(self) -> str:
        """Render errors, and any suggestions, as one caller-facing message."""
        message = "; ".join(issue.message for issue in self.errors)
        if self.suggestions:
            message += "\n\nSuggested solution: " + "; ".join(
                issue.message for issue in self.suggestions
            )
        return message


@dataclass
class MutationResult:
    success: bool
    relationship_id: str | None = None
    error: str | None = None
    issues: list[ValidationIssue] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    corrected: bool = False
    actual_type: RelationType | None = None


@dataclass
class RelationSummary:
    id: str
    from_member_id: str
    to_member_id: str
    relation_type: RelationType
    sibling_type: SiblingType | None = None
    from_member: MemberName | None = None
    to_member: MemberName | None = None


@dataclass
class RelatedPeer:
    id: str
    type: RelationType
    person_id: str
    person: Member | None
    sibling_type: SiblingType | None = None
    metadata: dict | None = None


@dataclass
class MemberWithRelations:
    member: Member
    relations: list[RelatedPeer] = field(default_factory=list)


@dataclass
class DirectionSuggestion:
    suggested_type: RelationType
    reason: str


@dataclass
class RelationshipSuggestion:
    member: Member
    suggested_relationship: RelationType
    confidence: float
    reason: str


@dataclass
class IntegrityIssue:
    issue_type: str
    description: str
    member_id_1: str | None
    member_id_2: str | None
    relationship_id: str | None = None


@dataclass
class RepairAction:
    repair_type: str
    description: str
    relationships_created: int = 0
    relationships_deleted: int = 0
