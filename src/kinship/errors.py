"""Error types: store failures and structured validation issues."""

from dataclasses import dataclass, field
from enum import Enum


class StoreError(Exception):
    """A call against the backing store failed."""


class MetadataColumnMissing(StoreError):
    """The relations table has no metadata column."""


class DuplicateRelationship(StoreError):
    """The unique index on (from_member_id, to_member_id) rejected an insert."""


class IssueKind(str, Enum):
    UNKNOWN_TYPE = "unknown_type"
    SELF_RELATIONSHIP = "self_relationship"
    MEMBERS_NOT_FOUND = "members_not_found"
    ALREADY_EXISTS = "already_exists"
    CONFLICTING_REVERSE = "conflicting_reverse"
    DUPLICATE_RELATIONSHIP = "duplicate_relationship"
    PARENT_NOT_OLDER = "parent_not_older"
    CHILD_NOT_YOUNGER = "child_not_younger"
    TRY_OPPOSITE_DIRECTION = "try_opposite_direction"
    CIRCULAR = "circular"
    BIRTH_DATES_RECOMMENDED = "birth_dates_recommended"
    INVALID_BIRTH_DATE = "invalid_birth_date"
    SMALL_AGE_GAP = "small_age_gap"
    LARGE_AGE_GAP = "large_age_gap"
    SAME_GENDER_SPOUSES = "same_gender_spouses"
    VALIDATION_FAILED = "validation_failed"


MESSAGES = {
    IssueKind.UNKNOWN_TYPE: "Unknown relationship type: {relation_type}",
    IssueKind.SELF_RELATIONSHIP: "A family member cannot have a relationship with themselves",
    IssueKind.MEMBERS_NOT_FOUND: "Could not find both family members",
    IssueKind.ALREADY_EXISTS: (
        "Relationship already exists: {from_name} is already {existing_type} of {to_name}"
    ),
    IssueKind.CONFLICTING_REVERSE: (
        "Conflicting relationship: {to_name} is already recorded as {existing_type} of {from_name}"
    ),
    IssueKind.DUPLICATE_RELATIONSHIP: "Relationship already exists between these family members",
    IssueKind.PARENT_NOT_OLDER: (
        "{from_name} (born {from_year}) cannot be the parent of {to_name} (born {to_year}). "
        "Parents must be born before their children."
    ),
    IssueKind.CHILD_NOT_YOUNGER: (
        "{from_name} (born {from_year}) cannot be the child of {to_name} (born {to_year}). "
        "Children must be born after their parents."
    ),
    IssueKind.TRY_OPPOSITE_DIRECTION: (
        "Try creating the relationship in the opposite direction: "
        "{to_first_name} as {relation_type} of {from_first_name}"
    ),
    IssueKind.CIRCULAR: "This relationship would create a circular parent-child relationship",
    IssueKind.BIRTH_DATES_RECOMMENDED: "Birth dates are recommended for {context} relationships",
    IssueKind.INVALID_BIRTH_DATE: "Invalid birth date format detected",
    IssueKind.SMALL_AGE_GAP: (
        "Age difference of {years} years is quite small for a {context} relationship. "
        "Please verify this is correct."
    ),
    IssueKind.LARGE_AGE_GAP: (
        "Age difference of {years} years is quite large for a {context} relationship"
    ),
    IssueKind.SAME_GENDER_SPOUSES: (
        "Both members have the same gender - this may be intentional for same-sex relationships"
    ),
    IssueKind.VALIDATION_FAILED: "An unexpected error occurred during validation",
}


@dataclass
class ValidationIssue:
    """A rule outcome as a kind plus parameters; `message` renders it."""

    kind: IssueKind
    params: dict = field(default_factory=dict)

    @property
    def message(self) -> str:
        return MESSAGES[self.kind].format(**self.params)

    def __str__(self) -> str:
        return self.message
