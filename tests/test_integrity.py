"""Tests for whole-tree integrity checks and repairs."""
from kinship.errors import StoreError
from kinship.models import RelationshipEdge, RelationshipRequest, RelationType


def _edge(a, b, kind):
    return RelationshipEdge("", a, b, RelationType(kind))


def _kinds(issues):
    return sorted(issue.issue_type for issue in issues)


class TestCheckIntegrity:

    def test_consistent_tree(self, engine, seed):
        seed(("dad", "1960-01-01"), ("mum", "1962-01-01"), ("kid", "1990-01-01"))
        engine.create_relationship(RelationshipRequest("dad", "mum", RelationType.SPOUSE))
        engine.create_relationship(RelationshipRequest("dad", "kid", RelationType.PARENT))
        assert engine.check_integrity() == []

    def test_orphaned_relationship(self, engine, seed):
        seed(("dad", None))
        engine.store.insert_edges([_edge("dad", "gone", "parent"), _edge("gone", "dad", "child")])

        issues = engine.check_integrity()
        orphans = [i for i in issues if i.issue_type == "orphaned_relationship"]
        assert len(orphans) == 2
        assert {i.relationship_id for i in orphans} == {e.id for e in engine.store.all()}

    def test_missing_reciprocal(self, engine, seed):
        seed(("john", None), ("mary", None))
        engine.store.insert_edges([_edge("john", "mary", "spouse")])

        issues = engine.check_integrity()
        assert _kinds(issues) == ["incomplete_bidirectional"]
        assert (issues[0].member_id_1, issues[0].member_id_2) == ("john", "mary")

    def test_mismatched_reciprocal(self, engine, seed):
        seed(("john", None), ("mary", None))
        engine.store.insert_edges([_edge("john", "mary", "spouse"), _edge("mary", "john", "sibling")])
        assert _kinds(engine.check_integrity()) == ["incomplete_bidirectional"] * 2

    def test_cycle(self, engine, seed):
        seed(("a", None), ("b", None), ("c", None))
        engine.store.insert_edges([
            _edge("a", "b", "parent"), _edge("b", "a", "child"),
            _edge("b", "c", "parent"), _edge("c", "b", "child"),
            _edge("c", "a", "parent"), _edge("a", "c", "child"),
        ])
        issues = engine.check_integrity()
        cycles = [i for i in issues if i.issue_type == "circular_relationship"]
        assert len(cycles) == 1
        assert "Circular parent-child relationship detected" in cycles[0].description

    def test_impossible_birth_order(self, engine, seed):
        seed(("dad", "2000-01-01"), ("kid", "1990-01-01"))
        engine.store.insert_edges([_edge("dad", "kid", "parent"), _edge("kid", "dad", "child")])

        issues = engine.check_integrity()
        assert _kinds(issues) == ["impossible_birth_order"]
        assert (issues[0].member_id_1, issues[0].member_id_2) == ("dad", "kid")
        assert "Kid Doe born before parent Dad Doe" in issues[0].description

    def test_suspicious_parent_age(self, engine, seed):
        seed(("dad", "1980-01-01"), ("kid", "1990-01-01"))
        engine.store.insert_edges([_edge("dad", "kid", "parent"), _edge("kid", "dad", "child")])
        assert _kinds(engine.check_integrity()) == ["suspicious_parent_age"]

    def test_store_failure(self, engine, monkeypatch):
        def boom():
            raise StoreError("gone")

        monkeypatch.setattr(engine.store, "all", boom)
        assert _kinds(engine.check_integrity()) == ["check_failed"]


class TestRepairIntegrity:

    def test_nothing_to_repair(self, engine, seed):
        seed(("john", None), ("mary", None))
        engine.create_relationship(RelationshipRequest("john", "mary", RelationType.SPOUSE))

        actions = engine.repair_integrity()
        assert [a.repair_type for a in actions] == ["no_repairs_needed"]

    def test_deletes_orphans(self, engine, seed, edges):
        seed(("dad", None), ("kid", None))
        engine.create_relationship(RelationshipRequest("dad", "kid", RelationType.PARENT))
        engine.store.insert_edges([_edge("dad", "gone", "parent"), _edge("gone", "dad", "child")])

        actions = engine.repair_integrity()
        assert [(a.repair_type, a.relationships_deleted) for a in actions] == [
            ("orphaned_cleanup", 2)
        ]
        assert edges() == {("dad", "kid", "parent"), ("kid", "dad", "child")}
        assert engine.check_integrity() == []

    def test_creates_missing_reciprocals(self, engine, seed, edges):
        seed(("dad", "1960-01-01"), ("kid", "1990-01-01"), ("ann", None), ("bob", None))
        engine.store.insert_edges([_edge("dad", "kid", "parent"), _edge("ann", "bob", "sibling")])

        actions = engine.repair_integrity()
        assert [(a.repair_type, a.relationships_created) for a in actions] == [
            ("bidirectional_repair", 2)
        ]
        assert ("kid", "dad", "child") in edges()
        assert ("bob", "ann", "sibling") in edges()
        assert engine.check_integrity() == []

    def test_leaves_contradictions_for_review(self, engine, seed, edges):
        seed(("john", None), ("mary", None))
        engine.store.insert_edges([_edge("john", "mary", "spouse"), _edge("mary", "john", "sibling")])

        actions = engine.repair_integrity()
        assert [a.repair_type for a in actions] == ["no_repairs_needed"]
        assert len(edges()) == 2

    def test_store_failure(self, engine, seed, monkeypatch):
        seed(("john", None))
        engine.store.insert_edges([_edge("john", "gone", "spouse")])

        def boom(relationship_id):
            raise StoreError("read-only")

        monkeypatch.setattr(engine.store, "delete", boom)
        assert [a.repair_type for a in engine.repair_integrity()] == ["repair_failed"]
