"""Age-based heuristics for proposing and correcting relationships."""

import logging
from typing import TYPE_CHECKING

from kinship.errors import StoreError
from kinship.models import (
    DirectionSuggestion,
    MutationResult,
    RelationshipRequest,
    RelationshipSuggestion,
    RelationType,
)
from kinship.parsing import birth_year

if TYPE_CHECKING:
    from kinship.engine import RelationshipEngine

logger = logging.getLogger(__name__)

PARENT_CHILD_GAP = (15, 50)
SIBLING_MAX_GAP = 10
PARENT_CHILD_CONFIDENCE = 0.8
SIBLING_CONFIDENCE = 0.6

_PARENT_CHILD_TYPES = {RelationType.PARENT.value, RelationType.CHILD.value}


class SuggestionEngine:
    def __init__(self, engine: "RelationshipEngine"):
        self.engine = engine

    def suggest_direction(
        self, from_member_id: str, to_member_id: str, desired_type: RelationType | str
    ) -> DirectionSuggestion | None:
        """Propose parent or child for `from_member_id`, whichever matches the birth dates."""
        if desired_type not in _PARENT_CHILD_TYPES:
            return None

        try:
            members = self.engine.directory.get_many([from_member_id, to_member_id])
        except StoreError:
            logger.error("Error suggesting relationship direction", exc_info=True)
            return None

        from_member = members.get(from_member_id)
        to_member = members.get(to_member_id)
        if from_member is None or to_member is None:
            return None

        from_year = birth_year(from_member.birth_date)
        to_year = birth_year(to_member.birth_date)
        if from_year is None or to_year is None:
            return None

        # Same-year parent/child pairs are always rejected, so suggest nothing
        if from_year < to_year:
            return DirectionSuggestion(
                suggested_type=RelationType.PARENT,
                reason=(
                    f"{from_member.first_name} is older than {to_member.first_name}, "
                    "so they should be the parent"
                ),
            )
        if from_year > to_year:
            return DirectionSuggestion(
                suggested_type=RelationType.CHILD,
                reason=(
                    f"{from_member.first_name} is younger than {to_member.first_name}, "
                    "so they should be the child"
                ),
            )
        return None

    def create_smart(
        self, from_member_id: str, to_member_id: str, desired_type: RelationType | str
    ) -> MutationResult:
        """
        Create the relationship as asked; if a parent/child request fails and
        the birth dates point the other way, retry once with the other type.
        """
        result = self.engine.create_relationship(
            RelationshipRequest(from_member_id, to_member_id, desired_type)
        )
        if result.success:
            result.actual_type = RelationType(desired_type)
            return result

        suggestion = self.suggest_direction(from_member_id, to_member_id, desired_type)
        if suggestion is None or suggestion.suggested_type == RelationType(desired_type):
            return result

        corrected = self.engine.create_relationship(
            RelationshipRequest(from_member_id, to_member_id, suggestion.suggested_type)
        )
        if not corrected.success:
            return result

        logger.info(
            "Corrected %s -> %s from %s to %s: %s",
            from_member_id,
            to_member_id,
            RelationType(desired_type).value,
            suggestion.suggested_type.value,
            suggestion.reason,
        )
        corrected.corrected = True
        corrected.actual_type = suggestion.suggested_type
        return corrected

    def suggest_candidates(self, member_id: str) -> list[RelationshipSuggestion]:
        """
        Rank unrelated members as likely relatives of `member_id`.

        `suggested_relationship` is the candidate's role relative to the
        member, as accepted by `resolve_direction`.
        """
        try:
            member = self.engine.directory.get(member_id)
            if member is None:
                return []
            others = [m for m in self.engine.directory.all() if m.id != member_id]
            related = self.engine.store.related_member_ids(member_id)
        except StoreError:
            logger.error("Error getting relationship suggestions", exc_info=True)
            return []

        member_year = birth_year(member.birth_date)
        if member_year is None:
            return []

        suggestions: list[RelationshipSuggestion] = []
        for other in others:
            if other.id in related:
                continue
            other_year = birth_year(other.birth_date)
            if other_year is None:
                continue

            gap = abs(member_year - other_year)
            if PARENT_CHILD_GAP[0] <= gap <= PARENT_CHILD_GAP[1]:
                suggestions.append(
                    RelationshipSuggestion(
                        member=other,
                        suggested_relationship=(
                            RelationType.PARENT if other_year < member_year else RelationType.CHILD
                        ),
                        confidence=PARENT_CHILD_CONFIDENCE,
                        reason=f"Age difference of {gap} years suggests parent-child relationship",
                    )
                )
            elif gap <= SIBLING_MAX_GAP:
                suggestions.append(
                    RelationshipSuggestion(
                        member=other,
                        suggested_relationship=RelationType.SIBLING,
                        confidence=SIBLING_CONFIDENCE,
                        reason=f"Similar age ({gap} years difference) suggests sibling relationship",
                    )
                )

        return sorted(suggestions, key=lambda s: s.confidence, reverse=True)
