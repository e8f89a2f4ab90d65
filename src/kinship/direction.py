"""Translate a relationship chosen from one member's point of view into a directed edge."""

from kinship.models import RelationshipDirection, RelationType

RECIPROCAL_TYPES = {
    RelationType.PARENT: RelationType.CHILD,
    RelationType.CHILD: RelationType.PARENT,
    RelationType.SPOUSE: RelationType.SPOUSE,
    RelationType.SIBLING: RelationType.SIBLING,
}


def reciprocal_type(relation_type: RelationType | str) -> RelationType:
    return RECIPROCAL_TYPES[RelationType(relation_type)]


def resolve_direction(
    current_member_id: str, selected_member_id: str, desired_type: RelationType | str
) -> RelationshipDirection:
    """
    Resolve "the selected member is my <desired_type>" into a canonical edge.

    Parent/child choices always produce a `parent` edge running from the older
    generation to the younger one; spouse and sibling edges run from the
    current member to the selected one.
    """
    desired_type = RelationType(desired_type)

    if desired_type == RelationType.PARENT:
        return RelationshipDirection(
            from_member_id=selected_member_id,
            to_member_id=current_member_id,
            relation_type=RelationType.PARENT,
            current_role=RelationType.CHILD,
            selected_role=RelationType.PARENT,
        )
    if desired_type == RelationType.CHILD:
        return RelationshipDirection(
            from_member_id=current_member_id,
            to_member_id=selected_member_id,
            relation_type=RelationType.PARENT,
            current_role=RelationType.PARENT,
            selected_role=RelationType.CHILD,
        )
    return RelationshipDirection(
        from_member_id=current_member_id,
        to_member_id=selected_member_id,
        relation_type=desired_type,
        current_role=desired_type,
        selected_role=desired_type,
    )
