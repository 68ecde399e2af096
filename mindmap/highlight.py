"""
Highlight and focus propagation over the current node/connection lists.

The "active" node is the hovered node, falling back to the focused node.
Everything here is read-only: the controller owns the lists, these helpers
only look at them.

Connections are indexed in an undirected NetworkX graph keyed by node id so
one-hop lookups do not rescan the whole connection list per query.
"""

from typing import Dict, Iterable, List, Optional, Set, Tuple

import networkx as nx

from mindmap.models import MindmapConnection, MindmapNode, NodeType, UserData


def active_node_id(hover_id: Optional[str], focus_id: Optional[str]) -> Optional[str]:
    return hover_id or focus_id


def is_connection_highlighted(conn: MindmapConnection, active_id: Optional[str]) -> bool:
    if not active_id:
        return False
    return conn.from_id == active_id or conn.to_id == active_id


def is_connection_related(conn: MindmapConnection, related_ids: Iterable[str]) -> bool:
    related = related_ids if isinstance(related_ids, (set, frozenset)) else set(related_ids)
    return conn.from_id in related or conn.to_id in related


class ConnectionIndex:
    """
    Adjacency index over a node/connection snapshot.

    Edges keep a list of the connections they came from, so parallel
    connections between the same pair are preserved for
    connections_touching().
    """

    def __init__(self, nodes: List[MindmapNode], connections: List[MindmapConnection]):
        self.nodes = nodes
        self.connections = connections
        self.G = nx.Graph()
        for node in nodes:
            self.G.add_node(node.id, type=node.type)
        for i, conn in enumerate(connections):
            if self.G.has_edge(conn.from_id, conn.to_id):
                self.G.edges[conn.from_id, conn.to_id]['conn_indices'].append(i)
            else:
                # Stale ids still get indexed; rendering is what skips them
                self.G.add_edge(conn.from_id, conn.to_id, conn_indices=[i])

    def related_node_ids(self, active_id: Optional[str]) -> Set[str]:
        """One-hop neighbours of active_id, in both directions."""
        if not active_id or active_id not in self.G:
            return set()
        return {n for n in self.G.neighbors(active_id) if n != active_id}

    def connections_touching(self, node_id: Optional[str]) -> List[MindmapConnection]:
        if not node_id or node_id not in self.G:
            return []
        indices = set()
        for _, _, attrs in self.G.edges(node_id, data=True):
            indices.update(attrs['conn_indices'])
        # Keep input order
        return [self.connections[i] for i in sorted(indices)]

    def visible_nodes(self, focus_id: Optional[str]) -> List[MindmapNode]:
        """
        With a focus: the center, the focused node and its one-hop
        neighbours. Without: every node.
        """
        if not focus_id:
            return list(self.nodes)
        keep = self.related_node_ids(focus_id)
        keep.add(focus_id)
        return [n for n in self.nodes if n.id in keep or n.type is NodeType.CENTER]

    def visible_connections(self, focus_id: Optional[str]) -> List[MindmapConnection]:
        if not focus_id:
            return list(self.connections)
        return self.connections_touching(focus_id)

    def shared_topic_pairs(self, active_id: Optional[str]) -> List[Tuple[str, str, List[str]]]:
        """
        For an active user node: (active_id, related_id, shared_modules) for
        every related user node whose module list overlaps the active one.
        """
        nodes_by_id: Dict[str, MindmapNode] = {n.id: n for n in self.nodes}
        active = nodes_by_id.get(active_id) if active_id else None
        if active is None or not isinstance(active.data, UserData):
            return []

        pairs = []
        for related_id in sorted(self.related_node_ids(active_id)):
            related = nodes_by_id.get(related_id)
            if related is None or not isinstance(related.data, UserData):
                continue
            shared = [m for m in active.data.modules if m in related.data.modules]
            if shared:
                pairs.append((active_id, related_id, shared))
        return pairs


def related_node_ids(connections: List[MindmapConnection], active_id: Optional[str]) -> Set[str]:
    return ConnectionIndex([], connections).related_node_ids(active_id)


def visible_nodes(nodes: List[MindmapNode], connections: List[MindmapConnection],
                  focus_id: Optional[str]) -> List[MindmapNode]:
    return ConnectionIndex(nodes, connections).visible_nodes(focus_id)


def visible_connections(connections: List[MindmapConnection],
                        focus_id: Optional[str]) -> List[MindmapConnection]:
    return ConnectionIndex([], connections).visible_connections(focus_id)
