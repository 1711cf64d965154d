"""Winner extraction and the legacy labelled-edge format.

The web front end draws the runoff as a Sankey diagram from edges shaped like
{"source": "Celeste (4)  ", "target": "Celeste (6)   ", "weight": "4"}.
The number of trailing spaces on a label is the round number, which keeps
labels of the same game in different rounds distinct and lets the winner be
recovered from the labels alone.
"""

import re
from typing import Any

from gotm.models import RoundVertex, TransferEdge

VOTE_COUNT_SUFFIX = re.compile(r"\s*\(\d+\)\s*$")
TRAILING_SPACES = re.compile(r" *$")


def vertex_label(vertex: RoundVertex) -> str:
    """Render a vertex as "<name> (<votes>)" followed by one space per round."""
    return f"{vertex.name} ({vertex.votes})" + " " * vertex.round


def to_legacy_edges(edges: list[TransferEdge]) -> list[dict[str, str]]:
    """Convert edges to the labelled form consumed by the Sankey chart."""
    return [
        {
            "source": vertex_label(edge.source),
            "target": vertex_label(edge.target),
            "weight": str(edge.weight),
        }
        for edge in edges
    ]


def get_base_name(label: str) -> str:
    """Strip the vote count and round padding from a label."""
    return VOTE_COUNT_SUFFIX.sub("", label).strip()


def get_round(label: str) -> int:
    """Round number encoded in a label's trailing spaces."""
    return len(TRAILING_SPACES.search(label).group(0))


def find_winner(edges: list[TransferEdge]) -> RoundVertex | None:
    """Return the winner marker of a round graph, or None for an empty graph.

    Eliminated candidates' last vertices are sinks too, so the winner is the
    sink with the highest round number.
    """
    sources = {edge.source for edge in edges}
    sinks = [edge.target for edge in edges if edge.target not in sources]
    if not sinks:
        return None
    return max(sinks, key=lambda vertex: vertex.round)


def get_winner_node(results: list[dict[str, Any]]) -> str | None:
    """Return the winner's label from legacy labelled edges.

    Picks the terminal label (a target that is never a source) with the most
    trailing spaces, i.e. from the latest round. Comparing rounds rather than
    taking the first terminal found matters: early eliminations produce
    terminal labels as well.
    """
    if not results:
        return None

    source_nodes = {r["source"] for r in results}
    terminal_nodes: list[str] = []
    for r in results:
        target = r["target"]
        if target not in source_nodes and target not in terminal_nodes:
            terminal_nodes.append(target)

    if not terminal_nodes:
        return results[-1]["target"]

    best = terminal_nodes[0]
    for node in terminal_nodes[1:]:
        if get_round(node) > get_round(best):
            best = node
    return best


def get_winner_name(results: list[dict[str, Any]]) -> str | None:
    """Return the winning game's name from legacy labelled edges."""
    node = get_winner_node(results)
    return get_base_name(node) if node else None
