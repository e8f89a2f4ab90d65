"""Relationship engine: validated creation, correction and deletion of edge pairs."""

import logging
import sqlite3

from kinship.config import EngineConfig
from kinship.database import MemberDirectory, RelationStore, connect
from kinship.direction import reciprocal_type, resolve_direction
from kinship.errors import (
    DuplicateRelationship,
    IssueKind,
    MetadataColumnMissing,
    StoreError,
    ValidationIssue,
)
from kinship.integrity import check_integrity, repair_integrity
from kinship.models import (
    DirectionSuggestion,
    IntegrityIssue,
    Member,
    MemberName,
    MemberWithRelations,
    MutationResult,
    RelatedPeer,
    RelationshipDirection,
    RelationshipEdge,
    RelationshipRequest,
    RelationshipSuggestion,
    RelationSummary,
    RelationType,
    RepairAction,
    SiblingType,
    ValidationResult,
)
from kinship.siblings import SiblingTypeInferencer
from kinship.suggestions import SuggestionEngine
from kinship.validation import RelationshipValidator

logger = logging.getLogger(__name__)


def _name(member: Member | None) -> MemberName | None:
    if member is None:
        return None
    return MemberName(first_name=member.first_name, last_name=member.last_name)


class RelationshipEngine:
    """
    Entry point for every relationship operation.

    The engine owns reciprocal maintenance: each created edge is stored
    together with its reciprocal, and deletes and sibling-type updates are
    mirrored onto the reciprocal edge. Public methods return structured
    results instead of raising.
    """

    def __init__(self, conn: sqlite3.Connection, metadata_supported: bool | None = None):
        self.conn = conn
        self.directory = MemberDirectory(conn)
        self.store = RelationStore(conn, metadata_supported=metadata_supported)
        self.validator = RelationshipValidator(self.directory, self.store)
        self.siblings = SiblingTypeInferencer(self.store)
        self.suggestions = SuggestionEngine(self)

    @classmethod
    def from_config(cls, config: EngineConfig) -> "RelationshipEngine":
        return cls(connect(config.db_path), metadata_supported=config.metadata_supported)

    @staticmethod
    def resolve_relationship_direction(
        current_member_id: str, selected_member_id: str, desired_type: RelationType | str
    ) -> RelationshipDirection:
        return resolve_direction(current_member_id, selected_member_id, desired_type)

    def validate_relationship(self, request: RelationshipRequest) -> ValidationResult:
        return self.validator.validate(request)

    def create_relationship(self, request: RelationshipRequest) -> MutationResult:
        validation = self.validator.validate(request)
        if not validation.is_valid:
            return MutationResult(
                success=False,
                error=validation.error_message(),
                issues=validation.errors + validation.suggestions,
            )

        warnings = [issue.message for issue in validation.warnings]
        if warnings:
            logger.warning("Relationship created with warnings: %s", "; ".join(warnings))

        relation_type = RelationType(request.relation_type)
        primary = RelationshipEdge(
            id="",
            from_member_id=request.from_member_id,
            to_member_id=request.to_member_id,
            relation_type=relation_type,
            metadata=request.metadata,
        )

        try:
            if relation_type == RelationType.SIBLING:
                primary.sibling_type = self.siblings.infer(
                    request.from_member_id, request.to_member_id
                )

            edges = [primary]
            reverse = self.store.find(request.to_member_id, request.from_member_id)
            if reverse is None:
                edges.append(
                    RelationshipEdge(
                        id="",
                        from_member_id=request.to_member_id,
                        to_member_id=request.from_member_id,
                        relation_type=reciprocal_type(relation_type),
                        sibling_type=primary.sibling_type,
                        metadata=request.metadata,
                    )
                )

            self._insert(edges, request.metadata)
        except DuplicateRelationship:
            issue = ValidationIssue(IssueKind.DUPLICATE_RELATIONSHIP)
            return MutationResult(success=False, error=issue.message, issues=[issue])
        except StoreError:
            logger.error("Error creating relationship", exc_info=True)
            return MutationResult(success=False, error="Failed to create relationship in database")

        # The primary edge is stored; syncing the existing reverse edge is best-effort
        if reverse is not None and relation_type == RelationType.SIBLING:
            try:
                self.store.update_sibling_type(reverse.id, primary.sibling_type)
            except StoreError:
                logger.warning(
                    "Could not update reciprocal relationship %s", reverse.id, exc_info=True
                )
                warnings.append("Could not update reciprocal relationship")

        logger.info(
            "Created relationship %s: %s is %s of %s",
            primary.id,
            request.from_member_id,
            relation_type.value,
            request.to_member_id,
        )
        return MutationResult(success=True, relationship_id=primary.id, warnings=warnings)

    def _insert(self, edges: list[RelationshipEdge], metadata: dict | None):
        include_metadata = bool(metadata) and self.store.supports_metadata_column()
        try:
            self.store.insert_edges(edges, include_metadata=include_metadata)
        except MetadataColumnMissing:
            # Schema lacks the column; remember that and retry without it
            logger.warning("relations table has no metadata column, storing without metadata")
            self.store.metadata_supported = False
            self.store.insert_edges(edges)

    def create_relationship_smart(
        self, from_member_id: str, to_member_id: str, desired_type: RelationType | str
    ) -> MutationResult:
        return self.suggestions.create_smart(from_member_id, to_member_id, desired_type)

    def update_relationship(
        self, relationship_id: str, sibling_type: SiblingType | str | None = None
    ) -> MutationResult:
        """
        Set the sibling type of a sibling edge and its reciprocal.

        `sibling_type=None` re-infers the type from the recorded parents.
        """
        if sibling_type is not None:
            try:
                sibling_type = SiblingType(sibling_type)
            except ValueError:
                return MutationResult(success=False, error=f"Invalid sibling type: {sibling_type}")

        try:
            edge = self.store.get(relationship_id)
        except StoreError:
            logger.error("Error fetching relationship %s", relationship_id, exc_info=True)
            return MutationResult(success=False, error="Failed to update relationship")

        if edge is None:
            return MutationResult(success=False, error="Relationship not found")
        if edge.relation_type != RelationType.SIBLING:
            return MutationResult(
                success=False, error="Sibling type can only be set on sibling relationships"
            )

        try:
            if sibling_type is None:
                sibling_type = self.siblings.infer(edge.from_member_id, edge.to_member_id)
            self.store.update_sibling_type(edge.id, sibling_type)
        except StoreError:
            logger.error("Error updating relationship %s", edge.id, exc_info=True)
            return MutationResult(success=False, error="Failed to update relationship")

        warnings = []
        try:
            updated = self.store.update_sibling_type_between(
                edge.to_member_id, edge.from_member_id, sibling_type
            )
            if not updated:
                logger.warning("No reciprocal sibling relationship found for %s", edge.id)
                warnings.append("Reciprocal relationship not found")
        except StoreError:
            logger.warning("Could not update reciprocal relationship of %s", edge.id, exc_info=True)
            warnings.append("Could not update reciprocal relationship")

        logger.info("Set sibling type of %s to %s", edge.id, sibling_type.value)
        return MutationResult(success=True, relationship_id=edge.id, warnings=warnings)

    def delete_relationship(self, relationship_id: str) -> MutationResult:
        try:
            edge = self.store.get(relationship_id)
        except StoreError:
            logger.error("Error fetching relationship %s", relationship_id, exc_info=True)
            return MutationResult(success=False, error="Failed to delete relationship")

        if edge is None:
            logger.warning("Relationship not found: %s", relationship_id)
            return MutationResult(success=False, error="Relationship not found")

        logger.info(
            "Deleting relationship %s (%s -> %s, %s)",
            edge.id,
            edge.from_member_id,
            edge.to_member_id,
            edge.relation_type.value,
        )
        try:
            self.store.delete(edge.id)
        except StoreError:
            logger.error("Failed to delete relationship %s", edge.id, exc_info=True)
            return MutationResult(success=False, error="Failed to delete relationship")

        # The primary edge is gone; a reciprocal failure is only logged
        try:
            deleted = self.store.delete_matching(
                edge.to_member_id, edge.from_member_id, reciprocal_type(edge.relation_type)
            )
            if not deleted:
                logger.warning("No reciprocal relationship found for %s", edge.id)
        except StoreError:
            logger.warning("Could not delete reciprocal relationship of %s", edge.id, exc_info=True)

        return MutationResult(success=True, relationship_id=edge.id)

    def get_all_relations(self) -> list[RelationSummary]:
        try:
            edges = self.store.all()
            members = self.directory.get_many(
                [e.from_member_id for e in edges] + [e.to_member_id for e in edges]
            )
        except StoreError:
            logger.error("Error fetching all relations", exc_info=True)
            return []

        return [
            RelationSummary(
                id=e.id,
                from_member_id=e.from_member_id,
                to_member_id=e.to_member_id,
                relation_type=e.relation_type,
                sibling_type=e.sibling_type,
                from_member=_name(members.get(e.from_member_id)),
                to_member=_name(members.get(e.to_member_id)),
            )
            for e in edges
        ]

    def get_family_members_with_relations(self) -> list[MemberWithRelations]:
        try:
            members = self.directory.all()
            edges = self.store.all()
        except StoreError:
            logger.error("Error fetching family members with relations", exc_info=True)
            return []

        by_id = {m.id: m for m in members}
        result = {m.id: MemberWithRelations(member=m) for m in members}
        for e in reversed(edges):  # oldest first
            entry = result.get(e.from_member_id)
            if entry is None:
                continue
            entry.relations.append(
                RelatedPeer(
                    id=e.id,
                    type=e.relation_type,
                    person_id=e.to_member_id,
                    person=by_id.get(e.to_member_id),
                    sibling_type=e.sibling_type,
                    metadata=e.metadata,
                )
            )
        return list(result.values())

    def suggest_relationship_direction(
        self, from_member_id: str, to_member_id: str, desired_type: RelationType | str
    ) -> DirectionSuggestion | None:
        return self.suggestions.suggest_direction(from_member_id, to_member_id, desired_type)

    def get_relationship_suggestions(self, member_id: str) -> list[RelationshipSuggestion]:
        return self.suggestions.suggest_candidates(member_id)

    def check_integrity(self) -> list[IntegrityIssue]:
        try:
            return check_integrity(self.directory, self.store)
        except StoreError:
            logger.error("Error validating family tree integrity", exc_info=True)
            return [
                IntegrityIssue("check_failed", "Could not read the family tree", None, None)
            ]

    def repair_integrity(self) -> list[RepairAction]:
        try:
            return repair_integrity(self.directory, self.store)
        except StoreError:
            logger.error("Error repairing family tree integrity", exc_info=True)
            return [RepairAction("repair_failed", "Repair stopped by a store error")]
