"""
Graphviz DOT diagram generator for container graphs.

Renders everything reachable from a root container:
    - Containers as boxes (root highlighted)
    - Text leaves as notes, asset leaves as folder-shaped nodes
    - One edge per reference, labelled with its slot index

Shared sub-containers appear once, with one incoming edge per referencing
slot, which makes a missed relink (a duplicate pointing back into the
original tree) easy to spot.
"""

from typing import Dict, List, Set

from locrep.host import HostDocument
from locrep.model import Container, NodeKind, Node


def _escape_dot_string(s: str) -> str:
    """Escape special characters for DOT labels."""
    if not s:
        return '""'
    # Escape backslashes first
    s = s.replace('\\', '\\\\')
    s = s.replace('"', '\\"')
    s = s.replace('\n', '\\n')
    return f'"{s}"'


def _node_id(node: Node) -> str:
    return _escape_dot_string(node.id)


def _node_label(host: HostDocument, node: Node, max_len: int = 30) -> str:
    if node.kind is NodeKind.CONTAINER:
        return node.name
    value = host.leaf_value(node)
    if len(value) > max_len:
        value = value[:max_len - 3] + "..."
    return f"{node.name}\n{value}" if value else node.name


_LEAF_SHAPES = {
    NodeKind.TEXT: "note",
    NodeKind.ASSET: "folder",
}


def generate_dot(host: HostDocument, root: Container) -> str:
    """
    Generate Graphviz DOT for the graph below `root`.

    Args:
        host: Document owning the containers
        root: Container to start from

    Returns:
        String containing DOT graph definition
    """
    lines = []

    # Header
    lines.append("digraph composition {")
    lines.append("  rankdir=LR;")
    lines.append("  node [shape=box, style=filled, fillcolor=lightblue];")

    nodes: Dict[str, Node] = {}
    edges: List[str] = []
    visited: Set[str] = set()
    stack = [root]
    while stack:
        container = stack.pop()
        if container.id in visited:
            continue
        visited.add(container.id)
        nodes[container.id] = container
        for index, ref in enumerate(host.references(container)):
            target = ref.target
            nodes.setdefault(target.id, target)
            edges.append(f"  {_node_id(container)} -> {_node_id(target)} [label=\"{index}\"];")
            if ref.is_container and target.id not in visited:
                stack.append(target)

    # =========================================================================
    # NODES
    # =========================================================================

    for node in nodes.values():
        label = _escape_dot_string(_node_label(host, node))
        if node.kind is NodeKind.CONTAINER:
            fill = "lightgreen" if node.id == root.id else "lightblue"
            lines.append(f"  {_node_id(node)} [label={label}, fillcolor={fill}];")
        else:
            shape = _LEAF_SHAPES[node.kind]
            lines.append(f"  {_node_id(node)} [label={label}, shape={shape}, fillcolor=white];")

    # =========================================================================
    # EDGES (REFERENCES)
    # =========================================================================

    lines.extend(edges)

    # Footer
    lines.append("}")

    return "\n".join(lines)


def save_dot_file(host: HostDocument, root: Container, filename: str) -> None:
    """
    Generate DOT and save to file.

    Args:
        host: Document owning the containers
        root: Container to start from
        filename: Output file path (.dot extension recommended)
    """
    dot = generate_dot(host, root)
    with open(filename, 'w', encoding='utf-8') as f:
        f.write(dot)


__all__ = ["generate_dot", "save_dot_file"]
