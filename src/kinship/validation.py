"""Validation of prospective relationship edges."""

from datetime import date
import logging

from kinship.database import MemberDirectory, RelationStore
from kinship.direction import reciprocal_type
from kinship.errors import IssueKind, StoreError, ValidationIssue
from kinship.graph import build_parent_graph, is_descendant
from kinship.models import Member, RelationshipRequest, RelationType, ValidationResult
from kinship.parsing import parse_birth_date

logger = logging.getLogger(__name__)

# Year gaps that trigger a warning (never a rejection)
PARENT_CHILD_MIN_GAP = 12
PARENT_CHILD_MAX_GAP = 80
SPOUSE_MAX_GAP = 30
SIBLING_MAX_GAP = 20


class CircularRelationshipGuard:
    """Reject parent/child edges that would make someone their own ancestor."""

    def __init__(self, store: RelationStore):
        self.store = store

    def check(self, request: RelationshipRequest) -> ValidationIssue | None:
        relation_type = RelationType(request.relation_type)
        if relation_type == RelationType.PARENT:
            parent_id, child_id = request.from_member_id, request.to_member_id
        elif relation_type == RelationType.CHILD:
            parent_id, child_id = request.to_member_id, request.from_member_id
        else:
            return None

        G = build_parent_graph(self.store.parent_child_edges())
        if is_descendant(G, parent_id, child_id):
            return ValidationIssue(IssueKind.CIRCULAR)
        return None


class RelationshipValidator:
    def __init__(self, directory: MemberDirectory, store: RelationStore):
        self.directory = directory
        self.store = store
        self.guard = CircularRelationshipGuard(store)

    def validate(self, request: RelationshipRequest) -> ValidationResult:
        """
        Check a prospective edge against the member records and the edges
        already stored.

        Errors make the request invalid. Warnings and suggestions are
        informational only.
        """
        result = ValidationResult()
        try:
            relation_type = RelationType(request.relation_type)
        except ValueError:
            result.errors.append(
                ValidationIssue(IssueKind.UNKNOWN_TYPE, {"relation_type": request.relation_type})
            )
            return result

        if request.from_member_id == request.to_member_id:
            result.errors.append(ValidationIssue(IssueKind.SELF_RELATIONSHIP))
            return result

        try:
            members = self.directory.get_many([request.from_member_id, request.to_member_id])
            from_member = members.get(request.from_member_id)
            to_member = members.get(request.to_member_id)
            if from_member is None or to_member is None:
                result.errors.append(ValidationIssue(IssueKind.MEMBERS_NOT_FOUND))
                return result

            existing = self.store.find(request.from_member_id, request.to_member_id)
            if existing is not None:
                result.errors.append(
                    ValidationIssue(
                        IssueKind.ALREADY_EXISTS,
                        {
                            "from_name": from_member.full_name,
                            "to_name": to_member.full_name,
                            "existing_type": existing.relation_type.value,
                        },
                    )
                )
                return result

            if relation_type in (RelationType.PARENT, RelationType.CHILD):
                self._check_parent_child(from_member, to_member, relation_type, result)
            elif relation_type == RelationType.SPOUSE:
                self._check_spouse(from_member, to_member, result)
            else:
                self._check_sibling(from_member, to_member, result)

            circular = self.guard.check(request)
            if circular is not None:
                result.errors.append(circular)
            else:
                reverse = self.store.find(request.to_member_id, request.from_member_id)
                if reverse is not None and reverse.relation_type != reciprocal_type(relation_type):
                    result.errors.append(
                        ValidationIssue(
                            IssueKind.CONFLICTING_REVERSE,
                            {
                                "from_name": from_member.full_name,
                                "to_name": to_member.full_name,
                                "existing_type": reverse.relation_type.value,
                            },
                        )
                    )
        except StoreError:
            logger.error("Error validating relationship", exc_info=True)
            result.errors.append(ValidationIssue(IssueKind.VALIDATION_FAILED))

        return result

    def _birth_dates(
        self, from_member: Member, to_member: Member, context: str, result: ValidationResult
    ) -> tuple[date, date] | None:
        if not from_member.birth_date or not to_member.birth_date:
            result.warnings.append(
                ValidationIssue(IssueKind.BIRTH_DATES_RECOMMENDED, {"context": context})
            )
            return None

        from_birth = parse_birth_date(from_member.birth_date)
        to_birth = parse_birth_date(to_member.birth_date)
        if from_birth is None or to_birth is None:
            result.warnings.append(ValidationIssue(IssueKind.INVALID_BIRTH_DATE))
            return None
        return from_birth, to_birth

    def _check_parent_child(
        self,
        from_member: Member,
        to_member: Member,
        relation_type: RelationType,
        result: ValidationResult,
    ):
        dates = self._birth_dates(from_member, to_member, "parent-child", result)
        if dates is None:
            return
        from_birth, to_birth = dates

        if relation_type == RelationType.PARENT:
            parent_birth, child_birth = from_birth, to_birth
            kind = IssueKind.PARENT_NOT_OLDER
        else:
            parent_birth, child_birth = to_birth, from_birth
            kind = IssueKind.CHILD_NOT_YOUNGER

        # A parent born in the same calendar year as the child is rejected too
        if parent_birth >= child_birth or parent_birth.year == child_birth.year:
            result.errors.append(
                ValidationIssue(
                    kind,
                    {
                        "from_name": from_member.full_name,
                        "from_year": from_birth.year,
                        "to_name": to_member.full_name,
                        "to_year": to_birth.year,
                    },
                )
            )
            result.suggestions.append(
                ValidationIssue(
                    IssueKind.TRY_OPPOSITE_DIRECTION,
                    {
                        "to_first_name": to_member.first_name,
                        "from_first_name": from_member.first_name,
                        "relation_type": relation_type.value,
                    },
                )
            )
            return

        gap = child_birth.year - parent_birth.year
        if gap < PARENT_CHILD_MIN_GAP:
            result.warnings.append(
                ValidationIssue(IssueKind.SMALL_AGE_GAP, {"years": gap, "context": "parent-child"})
            )
        elif gap > PARENT_CHILD_MAX_GAP:
            result.warnings.append(
                ValidationIssue(IssueKind.LARGE_AGE_GAP, {"years": gap, "context": "parent-child"})
            )

    def _check_spouse(self, from_member: Member, to_member: Member, result: ValidationResult):
        dates = self._birth_dates(from_member, to_member, "spouse", result)
        if dates is not None:
            gap = abs(dates[0].year - dates[1].year)
            if gap > SPOUSE_MAX_GAP:
                result.warnings.append(
                    ValidationIssue(IssueKind.LARGE_AGE_GAP, {"years": gap, "context": "spouse"})
                )

        if (
            from_member.gender
            and to_member.gender
            and from_member.gender.lower() == to_member.gender.lower()
        ):
            result.warnings.append(ValidationIssue(IssueKind.SAME_GENDER_SPOUSES))

    def _check_sibling(self, from_member: Member, to_member: Member, result: ValidationResult):
        dates = self._birth_dates(from_member, to_member, "sibling", result)
        if dates is None:
            return
        gap = abs(dates[0].year - dates[1].year)
        if gap > SIBLING_MAX_GAP:
            result.warnings.append(
                ValidationIssue(IssueKind.LARGE_AGE_GAP, {"years": gap, "context": "sibling"})
            )
