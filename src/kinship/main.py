"""
Command line administration of the family tree relationships.

    kinship init
    kinship load-members members.json
    kinship add asha bilal child --perspective
    kinship list
    kinship check
    kinship export tree.png --center asha --radius 2
"""

import argparse
import json
import logging
from pathlib import Path
import sys

from kinship.config import load_config
from kinship.database import connect, create_database, store_members
from kinship.engine import RelationshipEngine
from kinship.graph import build_graph, get_ego_subgraph
from kinship.models import Member, MutationResult, RelationshipRequest, RelationType
from kinship.plotting import export_tree

TYPES = [t.value for t in RelationType]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kinship", description=__doc__.strip().splitlines()[0])
    parser.add_argument("--db", help="SQLite database path (overrides config)")
    parser.add_argument("--config", type=Path, help="JSON config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="create the members and relations tables")

    p = sub.add_parser("load-members", help="insert or replace members from a JSON list")
    p.add_argument("path", type=Path)

    p = sub.add_parser("add", help="create a relationship")
    p.add_argument("from_member")
    p.add_argument("to_member")
    p.add_argument("type", choices=TYPES)
    p.add_argument(
        "--perspective",
        action="store_true",
        help="read as: TO_MEMBER is FROM_MEMBER's TYPE",
    )
    p.add_argument("--smart", action="store_true", help="retry parent/child in the other direction")
    p.add_argument("--marriage-date")
    p.add_argument("--divorce-date")
    p.add_argument("--notes")

    p = sub.add_parser("delete", help="delete a relationship and its reciprocal")
    p.add_argument("relationship_id")

    p = sub.add_parser("set-sibling-type", help="set or re-detect a sibling type")
    p.add_argument("relationship_id")
    p.add_argument("sibling_type", choices=["full", "half", "unknown", "auto"])

    sub.add_parser("list", help="list every relationship")

    p = sub.add_parser("suggest", help="suggest relatives for a member")
    p.add_argument("member_id")

    sub.add_parser("check", help="validate family tree integrity")
    sub.add_parser("repair", help="repair orphaned and one-sided relationships")

    p = sub.add_parser("export", help="render the family tree")
    p.add_argument("output", type=Path, nargs="?")
    p.add_argument("--center", help="only members around this member id")
    p.add_argument("--radius", type=int, default=2)

    return parser


def _report(result: MutationResult) -> int:
    if not result.success:
        print(f"Failed: {result.error}")
        return 1
    message = "Done"
    if result.relationship_id:
        message += f": {result.relationship_id}"
    if result.corrected and result.actual_type:
        message += f" (corrected to {result.actual_type.value})"
    print(message)
    for w in result.warnings:
        print(f"  - {w}")
    return 0


def _add(engine: RelationshipEngine, args) -> int:
    metadata = {
        k: v
        for k, v in {
            "marriage_date": args.marriage_date,
            "divorce_date": args.divorce_date,
            "notes": args.notes,
        }.items()
        if v
    } or None

    if args.perspective:
        direction = engine.resolve_relationship_direction(args.from_member, args.to_member, args.type)
        request = direction.to_request(metadata)
    else:
        request = RelationshipRequest(args.from_member, args.to_member, RelationType(args.type), metadata)

    if args.smart:
        return _report(
            engine.create_relationship_smart(
                request.from_member_id, request.to_member_id, request.relation_type
            )
        )
    return _report(engine.create_relationship(request))


def run(args) -> int:
    config = load_config(args.config)
    if args.db:
        config.db_path = args.db

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "init":
        conn = create_database(connect(config.db_path))
        conn.close()
        print(f"Initialized database: {config.db_path}")
        return 0

    engine = RelationshipEngine.from_config(config)
    try:
        if args.command == "load-members":
            with open(args.path) as f:
                members = [Member(**row) for row in json.load(f)]
            store_members(engine.conn, members)
            print(f"Loaded {len(members)} members")
            return 0

        if args.command == "add":
            return _add(engine, args)

        if args.command == "delete":
            return _report(engine.delete_relationship(args.relationship_id))

        if args.command == "set-sibling-type":
            sibling_type = None if args.sibling_type == "auto" else args.sibling_type
            return _report(engine.update_relationship(args.relationship_id, sibling_type))

        if args.command == "list":
            relations = engine.get_all_relations()
            for r in relations:
                from_name = f"{r.from_member.first_name} {r.from_member.last_name}" if r.from_member else r.from_member_id
                to_name = f"{r.to_member.first_name} {r.to_member.last_name}" if r.to_member else r.to_member_id
                extra = f" ({r.sibling_type.value})" if r.sibling_type else ""
                print(f"{r.id}  {from_name} is {r.relation_type.value}{extra} of {to_name}")
            print(f"{len(relations)} relationships")
            return 0

        if args.command == "suggest":
            for s in engine.get_relationship_suggestions(args.member_id):
                print(
                    f"{s.member.full_name}: {s.suggested_relationship.value} "
                    f"({s.confidence:.0%}) - {s.reason}"
                )
            return 0

        if args.command == "check":
            issues = engine.check_integrity()
            if not issues:
                print("No integrity issues found")
                return 0
            print(f"Found {len(issues)} integrity issues:")
            for issue in issues[:20]:
                print(f"  - {issue.issue_type}: {issue.description}")
            if len(issues) > 20:
                print(f"  ... and {len(issues) - 20} more")
            return 1

        if args.command == "repair":
            for action in engine.repair_integrity():
                print(
                    f"{action.repair_type}: {action.description} "
                    f"(created {action.relationships_created}, deleted {action.relationships_deleted})"
                )
            return 0

        if args.command == "export":
            members = engine.directory.all()
            G = build_graph(members, engine.store.all())
            if args.center:
                try:
                    G = get_ego_subgraph(G, args.center, radius=args.radius)
                except ValueError as exc:
                    print(exc)
                    return 1
            print(f"Exporting {G.number_of_nodes()} members")
            export_tree(G, args.output)
            return 0
    finally:
        engine.conn.close()

    return 2


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
