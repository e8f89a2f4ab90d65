"""Full/half sibling classification from recorded parents."""

import logging

from kinship.database import RelationStore
from kinship.graph import parent_child_pairs
from kinship.models import SiblingType

logger = logging.getLogger(__name__)


class SiblingTypeInferencer:
    def __init__(self, store: RelationStore):
        self.store = store

    def parents_of(self, member_id: str) -> set[str]:
        """Recorded parents of a member, from either edge direction."""
        return {
            parent
            for parent, child in parent_child_pairs(self.store.touching(member_id))
            if child == member_id
        }

    def infer(self, member_a_id: str, member_b_id: str) -> SiblingType:
        """
        Two or more shared parents make full siblings, one makes half
        siblings, none leaves the type unknown.
        """
        shared = self.parents_of(member_a_id) & self.parents_of(member_b_id)
        logger.debug(
            "Members %s and %s share %d recorded parent(s)", member_a_id, member_b_id, len(shared)
        )
        if len(shared) >= 2:
            return SiblingType.FULL
        if len(shared) == 1:
            return SiblingType.HALF
        return SiblingType.UNKNOWN
