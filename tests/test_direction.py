"""Tests for turning a member-perspective choice into a canonical edge."""
import pytest

from kinship.direction import reciprocal_type, resolve_direction
from kinship.models import RelationType


class TestResolveDirection:

    def test_selected_parent_points_from_selected_to_current(self):
        d = resolve_direction("me", "mum", RelationType.PARENT)
        assert (d.from_member_id, d.to_member_id) == ("mum", "me")
        assert d.relation_type == RelationType.PARENT
        assert d.current_role == RelationType.CHILD
        assert d.selected_role == RelationType.PARENT

    def test_selected_child_points_from_current_to_selected(self):
        d = resolve_direction("asha", "bilal", RelationType.CHILD)
        assert (d.from_member_id, d.to_member_id) == ("asha", "bilal")
        assert d.relation_type == RelationType.PARENT
        assert d.current_role == RelationType.PARENT
        assert d.selected_role == RelationType.CHILD

    @pytest.mark.parametrize("kind", [RelationType.SPOUSE, RelationType.SIBLING])
    def test_symmetric_types_keep_current_first(self, kind):
        d = resolve_direction("me", "them", kind)
        assert (d.from_member_id, d.to_member_id) == ("me", "them")
        assert d.relation_type == kind
        assert d.current_role == kind
        assert d.selected_role == kind

    def test_accepts_string_types(self):
        d = resolve_direction("me", "mum", "parent")
        assert d.relation_type == RelationType.PARENT
        assert d.from_member_id == "mum"

    def test_to_request_carries_direction_and_metadata(self):
        request = resolve_direction("a", "b", "spouse").to_request({"notes": "met in 1999"})
        assert request.from_member_id == "a"
        assert request.to_member_id == "b"
        assert request.relation_type == RelationType.SPOUSE
        assert request.metadata == {"notes": "met in 1999"}


class TestReciprocalType:

    @pytest.mark.parametrize("kind, expected", [
        ("parent", RelationType.CHILD),
        ("child", RelationType.PARENT),
        ("spouse", RelationType.SPOUSE),
        ("sibling", RelationType.SIBLING),
    ])
    def test_reciprocals(self, kind, expected):
        assert reciprocal_type(kind) == expected
