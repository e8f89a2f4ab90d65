"""Family tree chart export."""

from pathlib import Path

import networkx as nx
import pydot

from kinship.graph import build_union_layout_graph
from kinship.parsing import birth_year

FILL_COLORS = {"male": "lightblue", "m": "lightblue", "female": "lightpink", "f": "lightpink"}


def build_dot(G: nx.DiGraph) -> pydot.Dot:
    """
    Build a Graphviz chart of the family graph using the union-node model:
    ancestors at the top, spouses on the same rank, children hanging from
    their parents' family node.
    """
    H = build_union_layout_graph(G)

    P = pydot.Dot(graph_type="digraph")
    P.set("rankdir", "TB")
    P.set("splines", "ortho")
    P.set("nodesep", "0.4")
    P.set("ranksep", "0.6")

    couples: list[tuple] = []

    for node, data in H.nodes(data=True):
        if data.get("node_type") == "family":
            P.add_node(pydot.Node(str(node), shape="point", width="0.1", height="0.1", label=""))
            spouses = data.get("spouses", ())
            if len(spouses) == 2:
                couples.append(spouses)
            continue

        year = birth_year(data.get("birth_date"))
        label = f"{data.get('first_name', '')}\n{data.get('last_name', '')}\n{year or ''}"
        fillcolor = FILL_COLORS.get((data.get("gender") or "").lower(), "lightgray")
        P.add_node(
            pydot.Node(
                str(node),
                label=label,
                shape="box",
                style="rounded,filled",
                fillcolor=fillcolor,
                fontsize="10",
            )
        )

    for u, v, data in H.edges(data=True):
        if data.get("edge_type") == "spouse_to_family":
            P.add_edge(pydot.Edge(str(u), str(v), dir="none", color="darkgray"))
        else:
            P.add_edge(pydot.Edge(str(u), str(v), color="darkgray"))

    # Keep each couple on one rank
    for i, (a, b) in enumerate(couples):
        sg = pydot.Subgraph(f"couple_{i}", rank="same")
        sg.add_node(pydot.Node(str(a)))
        sg.add_node(pydot.Node(str(b)))
        P.add_subgraph(sg)

    return P


def export_tree(G: nx.DiGraph, output_path: Path | None = None):
    """
    Render the family chart. The format follows the file extension
    (png, svg, pdf or dot). With no path the chart is shown with matplotlib.
    """
    P = build_dot(G)

    if output_path:
        output_path = Path(output_path)
        ext = output_path.suffix.lower().lstrip(".")
        if ext == "dot":
            output_path.write_text(P.to_string())
        else:
            P.write(str(output_path), format=ext if ext in ("png", "svg", "pdf") else "png")
        print(f"Family tree saved to {output_path}")
        return

    import tempfile

    import matplotlib.image as mpimg
    import matplotlib.pyplot as plt

    with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
        P.write(f.name, format="png")
        img = mpimg.imread(f.name)
    plt.figure(figsize=(20, 16))
    plt.imshow(img)
    plt.axis("off")
    plt.tight_layout()
    plt.show()
