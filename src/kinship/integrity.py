"""Whole-tree integrity validation and repair."""

import logging

import networkx as nx

from kinship.database import MemberDirectory, RelationStore
from kinship.direction import reciprocal_type
from kinship.graph import build_parent_graph, parent_child_pairs
from kinship.models import IntegrityIssue, RelationshipEdge, RepairAction
from kinship.parsing import parse_birth_date

logger = logging.getLogger(__name__)


def check_integrity(directory: MemberDirectory, store: RelationStore) -> list[IntegrityIssue]:
    """
    Validate the stored family tree for:
    - Relationships referencing members that do not exist
    - Relationships without their reciprocal
    - Cycles in parent-child relationships
    - Impossible ages (child born before parent) and very young parents

    Returns a list of issues; an empty list means the tree is consistent.
    """
    members = {m.id: m for m in directory.all()}
    edges = store.all()
    issues: list[IntegrityIssue] = []

    for e in edges:
        if e.from_member_id not in members or e.to_member_id not in members:
            issues.append(
                IntegrityIssue(
                    "orphaned_relationship",
                    "Relationship references non-existent member",
                    e.from_member_id,
                    e.to_member_id,
                    e.id,
                )
            )

    by_pair = {(e.from_member_id, e.to_member_id): e for e in edges}
    for e in edges:
        reverse = by_pair.get((e.to_member_id, e.from_member_id))
        if reverse is None or reverse.relation_type != reciprocal_type(e.relation_type):
            issues.append(
                IntegrityIssue(
                    "incomplete_bidirectional",
                    "Missing reverse relationship",
                    e.from_member_id,
                    e.to_member_id,
                    e.id,
                )
            )

    parent_graph = build_parent_graph(edges)
    for cycle in nx.simple_cycles(parent_graph):
        issues.append(
            IntegrityIssue(
                "circular_relationship",
                f"Circular parent-child relationship detected: {cycle}",
                cycle[0],
                cycle[-1],
            )
        )

    for parent_id, child_id in sorted(parent_child_pairs(edges)):
        parent = members.get(parent_id)
        child = members.get(child_id)
        if parent is None or child is None:
            continue

        parent_birth = parse_birth_date(parent.birth_date)
        child_birth = parse_birth_date(child.birth_date)
        if parent_birth is None or child_birth is None:
            continue

        if child_birth <= parent_birth:
            issues.append(
                IntegrityIssue(
                    "impossible_birth_order",
                    f"Impossible: {child.full_name} born before parent {parent.full_name}",
                    parent_id,
                    child_id,
                )
            )
        elif child_birth.year - parent_birth.year < 12:
            issues.append(
                IntegrityIssue(
                    "suspicious_parent_age",
                    f"Suspicious: {parent.full_name} was less than 12 years old "
                    f"when {child.full_name} was born",
                    parent_id,
                    child_id,
                )
            )

    return issues


def repair_integrity(directory: MemberDirectory, store: RelationStore) -> list[RepairAction]:
    """
    Delete relationships pointing at missing members and create missing
    reciprocal relationships. Chronology and cycle problems need a human
    decision and are left to `check_integrity` to report.
    """
    actions: list[RepairAction] = []
    members = {m.id for m in directory.all()}
    edges = store.all()

    orphaned = [
        e for e in edges if e.from_member_id not in members or e.to_member_id not in members
    ]
    for e in orphaned:
        store.delete(e.id)
    if orphaned:
        logger.info("Deleted %d orphaned relationship(s)", len(orphaned))
        actions.append(
            RepairAction(
                "orphaned_cleanup",
                "Deleted orphaned relationships",
                relationships_deleted=len(orphaned),
            )
        )

    orphaned_ids = {e.id for e in orphaned}
    remaining = [e for e in edges if e.id not in orphaned_ids]
    by_pair = {(e.from_member_id, e.to_member_id): e for e in remaining}

    missing: list[RelationshipEdge] = []
    for e in remaining:
        reverse = by_pair.get((e.to_member_id, e.from_member_id))
        if reverse is None:
            missing.append(
                RelationshipEdge(
                    id="",
                    from_member_id=e.to_member_id,
                    to_member_id=e.from_member_id,
                    relation_type=reciprocal_type(e.relation_type),
                    sibling_type=e.sibling_type,
                    metadata=e.metadata,
                )
            )
        elif reverse.relation_type != reciprocal_type(e.relation_type):
            logger.warning(
                "Relationships %s and %s contradict each other, leaving them for review",
                e.id,
                reverse.id,
            )

    if missing:
        store.insert_edges(missing, include_metadata=store.supports_metadata_column())
        logger.info("Created %d missing reverse relationship(s)", len(missing))
        actions.append(
            RepairAction(
                "bidirectional_repair",
                "Created missing reverse relationships",
                relationships_created=len(missing),
            )
        )

    if not actions:
        actions.append(RepairAction("no_repairs_needed", "Family tree integrity is already valid"))
    return actions
