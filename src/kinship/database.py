"""SQLite storage for family members and relationship edges."""

from collections.abc import Iterable
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
import sqlite3
import uuid

from kinship.errors import DuplicateRelationship, MetadataColumnMissing, StoreError
from kinship.models import Member, RelationshipEdge, RelationType, SiblingType

logger = logging.getLogger(__name__)

_RELATION_COLUMNS = (
    "id, from_member_id, to_member_id, relation_type, sibling_type, created_at"
)


def connect(db_path: Path | str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def create_database(conn: sqlite3.Connection, with_metadata: bool = True) -> sqlite3.Connection:
    """Create the members and relations tables if they are missing."""
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS members (
            id TEXT PRIMARY KEY,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL DEFAULT '',
            birth_date TEXT,
            gender TEXT
        )
    """)

    metadata_column = "metadata TEXT," if with_metadata else ""
    cursor.execute(f"""
        CREATE TABLE IF NOT EXISTS relations (
            id TEXT PRIMARY KEY,
            from_member_id TEXT NOT NULL,
            to_member_id TEXT NOT NULL,
            relation_type TEXT NOT NULL
                CHECK (relation_type IN ('parent', 'child', 'spouse', 'sibling')),
            sibling_type TEXT CHECK (sibling_type IN ('full', 'half')),
            {metadata_column}
            created_at TEXT NOT NULL,
            CHECK (from_member_id != to_member_id),
            FOREIGN KEY (from_member_id) REFERENCES members(id),
            FOREIGN KEY (to_member_id) REFERENCES members(id)
        )
    """)

    # One edge per ordered pair; closes the check-then-insert race
    cursor.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS idx_relations_pair
        ON relations(from_member_id, to_member_id)
    """)
    cursor.execute(
        "CREATE INDEX IF NOT EXISTS idx_relations_to_member ON relations(to_member_id)"
    )

    conn.commit()
    return conn


def store_members(conn: sqlite3.Connection, members: Iterable[Member]):
    """Insert or replace member rows."""
    conn.executemany(
        """
        INSERT OR REPLACE INTO members (id, first_name, last_name, birth_date, gender)
        VALUES (?, ?, ?, ?, ?)
        """,
        [(m.id, m.first_name, m.last_name, m.birth_date, m.gender) for m in members],
    )
    conn.commit()


def _member_from_row(row) -> Member:
    return Member(
        id=row["id"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        birth_date=row["birth_date"],
        gender=row["gender"],
    )


def _sibling_type_from_db(value: str | None) -> SiblingType | None:
    return SiblingType(value) if value else None


def _sibling_type_to_db(value: SiblingType | None) -> str | None:
    if value is None or value == SiblingType.UNKNOWN:
        return None
    return SiblingType(value).value


class MemberDirectory:
    """Read-only access to member records."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def get_many(self, member_ids: Iterable[str]) -> dict[str, Member]:
        ids = list(dict.fromkeys(member_ids))
        if not ids:
            return {}
        placeholders = ", ".join("?" for _ in ids)
        try:
            rows = self.conn.execute(
                f"SELECT * FROM members WHERE id IN ({placeholders})", ids
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read members: {exc}") from exc
        return {row["id"]: _member_from_row(row) for row in rows}

    def get(self, member_id: str) -> Member | None:
        return self.get_many([member_id]).get(member_id)

    def all(self) -> list[Member]:
        try:
            rows = self.conn.execute("SELECT * FROM members ORDER BY first_name").fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read members: {exc}") from exc
        return [_member_from_row(row) for row in rows]


class RelationStore:
    """
    Create/read/update/delete of relationship edges.

    `metadata_supported` may be passed in to skip the capability probe;
    otherwise the first call to `supports_metadata_column` probes the schema
    and the answer is kept for the life of this instance.
    """

    def __init__(self, conn: sqlite3.Connection, metadata_supported: bool | None = None):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        self.metadata_supported = metadata_supported

    def supports_metadata_column(self) -> bool:
        if self.metadata_supported is not None:
            return self.metadata_supported

        try:
            self.conn.execute("SELECT metadata FROM relations LIMIT 1").fetchall()
        except sqlite3.OperationalError as exc:
            if not _is_metadata_column_error(exc):
                logger.warning("Unable to verify metadata column support: %s", exc)
            self.metadata_supported = False
            return False

        self.metadata_supported = True
        return True

    def _edge_from_row(self, row) -> RelationshipEdge:
        metadata = None
        if "metadata" in row.keys() and row["metadata"]:
            try:
                metadata = json.loads(row["metadata"])
            except ValueError:
                logger.warning("Ignoring malformed metadata on relationship %s", row["id"])
        return RelationshipEdge(
            id=row["id"],
            from_member_id=row["from_member_id"],
            to_member_id=row["to_member_id"],
            relation_type=RelationType(row["relation_type"]),
            sibling_type=_sibling_type_from_db(row["sibling_type"]),
            metadata=metadata,
            created_at=row["created_at"],
        )

    def _select(self, where: str = "", params: tuple = (), order: str = "") -> list[RelationshipEdge]:
        with_metadata = self.supports_metadata_column()
        columns = _RELATION_COLUMNS + (", metadata" if with_metadata else "")
        sql = f"SELECT {columns} FROM relations {where} {order}"
        try:
            rows = self.conn.execute(sql, params).fetchall()
        except sqlite3.OperationalError as exc:
            if not (with_metadata and _is_metadata_column_error(exc)):
                raise StoreError(f"Failed to read relations: {exc}") from exc
            logger.warning("relations table has no metadata column, reading without it")
            self.metadata_supported = False
            return self._select(where, params, order)
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read relations: {exc}") from exc
        return [self._edge_from_row(row) for row in rows]

    def get(self, relationship_id: str) -> RelationshipEdge | None:
        edges = self._select("WHERE id = ?", (relationship_id,))
        return edges[0] if edges else None

    def find(self, from_member_id: str, to_member_id: str) -> RelationshipEdge | None:
        """Return the edge on the ordered pair, if any."""
        edges = self._select(
            "WHERE from_member_id = ? AND to_member_id = ?", (from_member_id, to_member_id)
        )
        return edges[0] if edges else None

    def all(self) -> list[RelationshipEdge]:
        return self._select(order="ORDER BY created_at DESC, rowid DESC")

    def touching(self, member_id: str) -> list[RelationshipEdge]:
        return self._select(
            "WHERE from_member_id = ? OR to_member_id = ?", (member_id, member_id)
        )

    def parent_child_edges(self) -> list[RelationshipEdge]:
        return self._select("WHERE relation_type IN ('parent', 'child')")

    def related_member_ids(self, member_id: str) -> set[str]:
        """Ids of every member sharing an edge with `member_id`, in one query."""
        try:
            rows = self.conn.execute(
                """
                SELECT from_member_id, to_member_id FROM relations
                WHERE from_member_id = ? OR to_member_id = ?
                """,
                (member_id, member_id),
            ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to read relations: {exc}") from exc
        return {
            row["to_member_id"] if row["from_member_id"] == member_id else row["from_member_id"]
            for row in rows
        }

    def insert_edges(self, edges: list[RelationshipEdge], include_metadata: bool = False):
        """Insert edges in a single transaction: all are stored or none are."""
        now = datetime.now(timezone.utc).isoformat()
        columns = "id, from_member_id, to_member_id, relation_type, sibling_type, created_at"
        placeholders = "?, ?, ?, ?, ?, ?"
        if include_metadata:
            columns += ", metadata"
            placeholders += ", ?"

        rows = []
        for edge in edges:
            edge.id = edge.id or str(uuid.uuid4())
            edge.created_at = now
            row = (
                edge.id,
                edge.from_member_id,
                edge.to_member_id,
                RelationType(edge.relation_type).value,
                _sibling_type_to_db(edge.sibling_type),
                now,
            )
            if include_metadata:
                row += (json.dumps(edge.metadata) if edge.metadata else None,)
            rows.append(row)

        try:
            with self.conn:
                self.conn.executemany(
                    f"INSERT INTO relations ({columns}) VALUES ({placeholders})", rows
                )
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc).upper():
                raise DuplicateRelationship(str(exc)) from exc
            raise StoreError(f"Failed to insert relations: {exc}") from exc
        except sqlite3.OperationalError as exc:
            if include_metadata and _is_metadata_column_error(exc):
                raise MetadataColumnMissing(str(exc)) from exc
            raise StoreError(f"Failed to insert relations: {exc}") from exc
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to insert relations: {exc}") from exc

    def update_sibling_type(self, relationship_id: str, sibling_type: SiblingType | None) -> int:
        return self._write(
            "UPDATE relations SET sibling_type = ? WHERE id = ?",
            (_sibling_type_to_db(sibling_type), relationship_id),
        )

    def update_sibling_type_between(
        self, from_member_id: str, to_member_id: str, sibling_type: SiblingType | None
    ) -> int:
        return self._write(
            """
            UPDATE relations SET sibling_type = ?
            WHERE from_member_id = ? AND to_member_id = ? AND relation_type = 'sibling'
            """,
            (_sibling_type_to_db(sibling_type), from_member_id, to_member_id),
        )

    def delete(self, relationship_id: str) -> int:
        return self._write("DELETE FROM relations WHERE id = ?", (relationship_id,))

    def delete_matching(
        self, from_member_id: str, to_member_id: str, relation_type: RelationType
    ) -> int:
        return self._write(
            """
            DELETE FROM relations
            WHERE from_member_id = ? AND to_member_id = ? AND relation_type = ?
            """,
            (from_member_id, to_member_id, RelationType(relation_type).value),
        )

    def _write(self, sql: str, params: tuple) -> int:
        try:
            with self.conn:
                cursor = self.conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to write relations: {exc}") from exc
        return cursor.rowcount


def _is_metadata_column_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return "metadata" in message and "column" in message
