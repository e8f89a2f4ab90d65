"""NetworkX graph building and ancestry queries over relationship edges."""

from collections.abc import Iterable
import itertools

import networkx as nx

from kinship.models import Member, RelationshipEdge, RelationType


def parent_child_pairs(edges: Iterable[RelationshipEdge]) -> set[tuple[str, str]]:
    """(parent, child) pairs recorded by parent edges or child edges."""
    pairs: set[tuple[str, str]] = set()
    for edge in edges:
        if edge.relation_type == RelationType.PARENT:
            pairs.add((edge.from_member_id, edge.to_member_id))
        elif edge.relation_type == RelationType.CHILD:
            pairs.add((edge.to_member_id, edge.from_member_id))
    return pairs


def build_parent_graph(edges: Iterable[RelationshipEdge]) -> nx.DiGraph:
    """Directed graph with one parent -> child edge per recorded pair."""
    return nx.DiGraph(list(parent_child_pairs(edges)))


def is_descendant(G: nx.DiGraph, member_id: str, ancestor_id: str) -> bool:
    """True if `member_id` can be reached from `ancestor_id` along parent -> child edges."""
    if member_id not in G or ancestor_id not in G:
        return False
    return nx.has_path(G, ancestor_id, member_id)


def build_graph(members: Iterable[Member], edges: Iterable[RelationshipEdge]) -> nx.DiGraph:
    """
    Build a directed family graph.

    Parent/child edges are folded into a single parent -> child edge with
    relationship_type "parent". Spouse and sibling edges are kept as stored.
    """
    G = nx.DiGraph()

    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for m in members:
        G.add_node(
            m.id,
            person_name=m.full_name,
            first_name=m.first_name,
            last_name=m.last_name,
            gender=m.gender,
            birth_date=m.birth_date,
        )

    edges = list(edges)
    for parent, child in parent_child_pairs(edges):
        G.add_edge(parent, child, relationship_type=RelationType.PARENT.value)

    for edge in edges:
        if edge.relation_type in (RelationType.SPOUSE, RelationType.SIBLING):
            G.add_edge(
                edge.from_member_id,
                edge.to_member_id,
                relationship_type=edge.relation_type.value,
                sibling_type=edge.sibling_type.value if edge.sibling_type else None,
            )

    return G


def get_ego_subgraph(G: nx.DiGraph, center_id: str, radius: int = 2) -> nx.DiGraph:
    """
    Extract a subgraph containing nodes within `radius` edges of `center_id`,
    following edges in either direction.
    """
    if center_id not in G:
        raise ValueError(f"Member {center_id} not found in graph")

    undirected = G.to_undirected()
    ego = nx.ego_graph(undirected, center_id, radius=radius)
    return G.subgraph(ego.nodes()).copy()


def build_union_layout_graph(G: nx.DiGraph) -> nx.DiGraph:
    """
    Build a layout graph using the union-node model.

    Each spouse pair gets a "family node"; children hang from the family node
    of their parents, or from a single-parent family node when the parents
    are not recorded as spouses. Sibling edges are dropped, since siblings
    line up under their family node.
    """
    H = nx.DiGraph()

    for n, data in G.nodes(data=True):
        H.add_node(n, node_type="person", **data)

    spouse_pairs: set[tuple] = set()
    for u, v, edata in G.edges(data=True):
        if edata.get("relationship_type") == RelationType.SPOUSE.value:
            spouse_pairs.add(tuple(sorted([u, v], key=str)))

    fam_for_pair: dict[tuple, str] = {}
    for a, b in spouse_pairs:
        fam_id = f"FAM_{a}_{b}"
        fam_for_pair[(a, b)] = fam_id
        H.add_node(fam_id, node_type="family", spouses=(a, b))
        H.add_edge(a, fam_id, edge_type="spouse_to_family")
        H.add_edge(b, fam_id, edge_type="spouse_to_family")

    parents_by_child: dict[str, list[str]] = {}
    for u, v, edata in G.edges(data=True):
        if edata.get("relationship_type") == RelationType.PARENT.value:
            parents_by_child.setdefault(v, []).append(u)

    for child, parents in parents_by_child.items():
        parents = sorted(set(parents), key=str)

        fam_id = None
        for p1, p2 in itertools.combinations(parents, 2):
            if (p1, p2) in fam_for_pair:
                fam_id = fam_for_pair[(p1, p2)]
                break

        if fam_id is None:
            fam_id = f"FAM_{'_'.join(parents)}"
            if fam_id not in H:
                H.add_node(fam_id, node_type="family", spouses=tuple(parents))
                for p in parents:
                    H.add_edge(p, fam_id, edge_type="spouse_to_family")

        H.add_edge(fam_id, child, edge_type="family_to_child")

    return H
