"""Tests for full/half sibling inference from shared recorded parents."""
import pytest

from kinship.errors import StoreError
from kinship.models import RelationshipEdge, RelationshipRequest, RelationType, SiblingType
from kinship.siblings import SiblingTypeInferencer


@pytest.fixture
def family(engine, seed):
    """Parents p1..p4 and children with parent sets:
    s1 {p1, p2}, s2 {p1, p2}, s3 {p1, p3}, s4 {p3, p4}, s5 none.
    """
    seed(
        ("p1", "1950-01-01"), ("p2", "1952-01-01"), ("p3", "1953-01-01"), ("p4", "1955-01-01"),
        ("s1", "1980-01-01"), ("s2", "1982-01-01"), ("s3", "1984-01-01"),
        ("s4", "1986-01-01"), ("s5", "1988-01-01"),
    )
    for parent, child in [
        ("p1", "s1"), ("p2", "s1"),
        ("p1", "s2"), ("p2", "s2"),
        ("p1", "s3"), ("p3", "s3"),
        ("p3", "s4"), ("p4", "s4"),
    ]:
        assert engine.create_relationship(
            RelationshipRequest(parent, child, RelationType.PARENT)
        ).success
    return engine


class TestInferSiblingType:

    def test_two_shared_parents_are_full(self, family):
        assert family.siblings.infer("s1", "s2") == SiblingType.FULL

    def test_one_shared_parent_is_half(self, family):
        assert family.siblings.infer("s1", "s3") == SiblingType.HALF

    def test_no_shared_parent_is_unknown(self, family):
        assert family.siblings.infer("s1", "s4") == SiblingType.UNKNOWN
        assert family.siblings.infer("s1", "s5") == SiblingType.UNKNOWN

    @pytest.mark.parametrize("a, b", [("s1", "s2"), ("s1", "s3"), ("s3", "s4"), ("s2", "s5")])
    def test_commutative(self, family, a, b):
        assert family.siblings.infer(a, b) == family.siblings.infer(b, a)

    def test_parents_recorded_only_as_child_edges_count(self, engine, seed):
        seed(("m", None), ("x", None), ("y", None))
        # legacy rows holding only the child -> parent direction
        engine.store.insert_edges([
            RelationshipEdge("", "x", "m", RelationType.CHILD),
            RelationshipEdge("", "y", "m", RelationType.CHILD),
        ])
        inferencer = SiblingTypeInferencer(engine.store)
        assert inferencer.parents_of("x") == {"m"}
        assert inferencer.infer("x", "y") == SiblingType.HALF


class TestSiblingCreation:

    def test_create_stores_inferred_type_on_both_edges(self, family):
        result = family.create_relationship(RelationshipRequest("s1", "s2", RelationType.SIBLING))
        assert result.success

        primary = family.store.get(result.relationship_id)
        reciprocal = family.store.find("s2", "s1")
        assert primary.sibling_type == SiblingType.FULL
        assert reciprocal.relation_type == RelationType.SIBLING
        assert reciprocal.sibling_type == SiblingType.FULL

    def test_half_siblings(self, family):
        result = family.create_relationship(RelationshipRequest("s1", "s3", RelationType.SIBLING))
        assert family.store.get(result.relationship_id).sibling_type == SiblingType.HALF

    def test_unknown_is_persisted_as_null(self, family):
        result = family.create_relationship(RelationshipRequest("s1", "s4", RelationType.SIBLING))
        assert result.success
        assert family.store.get(result.relationship_id).sibling_type is None
        row = family.conn.execute(
            "SELECT sibling_type FROM relations WHERE id = ?", (result.relationship_id,)
        ).fetchone()
        assert row["sibling_type"] is None

    def test_existing_reverse_edge_takes_inferred_type(self, family, edges):
        family.store.insert_edges([RelationshipEdge("", "s2", "s1", RelationType.SIBLING)])
        assert family.store.find("s2", "s1").sibling_type is None

        result = family.create_relationship(RelationshipRequest("s1", "s2", RelationType.SIBLING))
        assert result.success
        assert result.warnings == []
        assert family.store.get(result.relationship_id).sibling_type == SiblingType.FULL
        assert family.store.find("s2", "s1").sibling_type == SiblingType.FULL
        assert {e for e in edges() if e[2] == "sibling"} == {
            ("s1", "s2", "sibling"), ("s2", "s1", "sibling"),
        }

    def test_reverse_edge_update_failure_is_a_warning(self, family, monkeypatch):
        family.store.insert_edges([RelationshipEdge("", "s2", "s1", RelationType.SIBLING)])

        def boom(*args):
            raise StoreError("database is locked")

        monkeypatch.setattr(family.store, "update_sibling_type", boom)
        result = family.create_relationship(RelationshipRequest("s1", "s2", RelationType.SIBLING))

        assert result.success
        assert result.warnings == ["Could not update reciprocal relationship"]
        assert family.store.get(result.relationship_id).sibling_type == SiblingType.FULL
        assert family.store.find("s2", "s1").sibling_type is None
