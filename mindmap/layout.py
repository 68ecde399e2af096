"""
Radial layout engine for the learning-network mindmap.

generate_layout() is a pure function: clusters + viewport + radii in,
nodes + connections out. The same input always produces the same
coordinates.

Placement:
- one center node at the viewport center
- one topic node per cluster on a ring of radius `center_radius`
- one user node per membership on a ring of radius `user_radius`
  around its topic

User identity policy: a user who belongs to several topics gets one node
per (topic, user) membership. Instances of the same user are linked by an
identity edge whose strength is the number of topics the user is in.
Two different users sharing k topics are linked inside every shared topic,
each edge carrying strength k.

Node ids are unique within a layout. Clusters repeating a topic name are
merged, and a user id whose topic/user join is already taken (topic "a-b"
with user "c" vs topic "a" with user "b-c") gets a "#n" suffix.
"""

import logging
import math
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Tuple

from mindmap.constants import (
    CENTER_COLOR,
    CENTER_ID,
    CENTER_LABEL,
    CENTER_SIZE,
    CLUSTER_ROTATION_STEP,
    MAX_ZOOM,
    MIN_ZOOM,
    TOPIC_COLORS,
    TOPIC_SIZE,
    USER_BASE_SIZE,
    USER_MAX_SIZE,
    USER_SIZE_PER_EXTRA_MODULE,
)
from mindmap.models import (
    CenterData,
    Cluster,
    Layout,
    LayoutRadii,
    MindmapConnection,
    MindmapNode,
    NodeType,
    TopicData,
    UserData,
    Viewport,
    coerce_clusters,
)

logger = logging.getLogger(__name__)


def clamp_zoom(zoom: float) -> float:
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def topic_node_id(index: int) -> str:
    return f"topic-{index}"


def user_node_id(topic: str, user_id: str) -> str:
    return f"user-{topic}-{user_id}"


def calculate_topic_positions(topic_count: int, center_x: float, center_y: float,
                              radius: float) -> List[Tuple[float, float]]:
    """Equal angular spacing: angle = index / topic_count * 2π."""
    positions = []
    for i in range(topic_count):
        angle = i / topic_count * 2 * math.pi
        positions.append((center_x + radius * math.cos(angle),
                          center_y + radius * math.sin(angle)))
    return positions


def calculate_user_positions(user_count: int, topic_x: float, topic_y: float,
                             radius: float, start_angle: float = 0.0) -> List[Tuple[float, float]]:
    """Member ring around a topic, equally spaced, rotated by start_angle."""
    positions = []
    if user_count <= 0:
        return positions
    step = 2 * math.pi / user_count
    for i in range(user_count):
        angle = start_angle + i * step
        positions.append((topic_x + radius * math.cos(angle),
                          topic_y + radius * math.sin(angle)))
    return positions


def user_node_size(modules: Sequence[str]) -> float:
    """Members engaged in more topics are drawn larger."""
    extra = max(len(modules) - 1, 0)
    return min(USER_BASE_SIZE + USER_SIZE_PER_EXTRA_MODULE * extra, USER_MAX_SIZE)


def calculate_initial_zoom(node_count: int) -> float:
    """Dense graphs start more zoomed-out."""
    if node_count < 10:
        zoom = 1.0
    elif node_count < 30:
        zoom = 0.8
    elif node_count < 50:
        zoom = 0.6
    else:
        zoom = 0.5
    return clamp_zoom(zoom)


def filter_clusters(clusters, selected_topic: Optional[str]) -> List[Cluster]:
    """Only the selected topic's cluster when a topic filter is set."""
    clusters = coerce_clusters(clusters)
    if not selected_topic:
        return clusters
    return [c for c in clusters if c.topic == selected_topic]


def _membership_index(clusters: List[Cluster]) -> Dict[str, List[int]]:
    """user_id -> ordered list of cluster indices the user belongs to."""
    index: Dict[str, List[int]] = {}
    for ci, cluster in enumerate(clusters):
        for member in cluster.users:
            seen = index.setdefault(member.user_id, [])
            if ci not in seen:
                seen.append(ci)
    return index


def _merge_duplicate_topics(clusters: List[Cluster]) -> List[Cluster]:
    """Clusters naming the same topic are folded into the first one."""
    merged: Dict[str, Cluster] = {}
    for cluster in clusters:
        if cluster.topic in merged:
            logger.warning(f"Duplicate topic '{cluster.topic}' merged into its first cluster")
            merged[cluster.topic].users.extend(cluster.users)
        else:
            merged[cluster.topic] = Cluster(topic=cluster.topic, users=list(cluster.users))
    return list(merged.values())


def _unique_id(base: str, used: set) -> str:
    """base, or base#n when the joined topic/user text is already taken."""
    node_id = base
    n = 1
    while node_id in used:
        node_id = f"{base}#{n}"
        n += 1
    used.add(node_id)
    return node_id


def _shared_topic_connections(clusters: List[Cluster],
                              node_ids: Dict[Tuple[int, str], str]) -> List[MindmapConnection]:
    memberships = _membership_index(clusters)
    connections = []

    # Identity edges between the per-topic instances of one user
    for user_id, topic_indices in memberships.items():
        if len(topic_indices) < 2:
            continue
        strength = len(topic_indices)
        for a, b in combinations(topic_indices, 2):
            connections.append(MindmapConnection(node_ids[(a, user_id)], node_ids[(b, user_id)], strength))

    # Different users sharing topics, linked inside each shared topic
    for ci, cluster in enumerate(clusters):
        member_ids = []
        for member in cluster.users:
            if member.user_id not in member_ids:
                member_ids.append(member.user_id)
        for u1, u2 in combinations(member_ids, 2):
            shared = len(set(memberships[u1]) & set(memberships[u2]))
            connections.append(MindmapConnection(node_ids[(ci, u1)], node_ids[(ci, u2)], shared))

    return connections


def generate_layout(clusters, viewport: Optional[Viewport] = None,
                    radii: Optional[LayoutRadii] = None) -> Layout:
    """
    Build the complete node/connection set for a list of clusters.

    An empty cluster list is not an error: the layout holds only the
    center node.
    """
    clusters = _merge_duplicate_topics(coerce_clusters(clusters))
    viewport = viewport or Viewport()
    radii = radii or LayoutRadii()
    center_x, center_y = viewport.center

    nodes: List[MindmapNode] = [MindmapNode(
        id=CENTER_ID,
        type=NodeType.CENTER,
        label=CENTER_LABEL,
        x=center_x,
        y=center_y,
        size=CENTER_SIZE,
        color=CENTER_COLOR,
        data=CenterData(),
    )]
    connections: List[MindmapConnection] = []
    node_ids: Dict[Tuple[int, str], str] = {}
    used_ids = set()

    topic_positions = calculate_topic_positions(len(clusters), center_x, center_y, radii.center_radius)

    for ci, cluster in enumerate(clusters):
        topic_id = topic_node_id(ci)
        topic_x, topic_y = topic_positions[ci]
        topic_color = TOPIC_COLORS[ci % len(TOPIC_COLORS)]

        # Duplicate entries for one user inside a cluster collapse to the first
        members = []
        for member in cluster.users:
            if (ci, member.user_id) in node_ids:
                logger.warning(f"Duplicate member '{member.user_id}' in topic '{cluster.topic}' ignored")
                continue
            node_ids[(ci, member.user_id)] = _unique_id(user_node_id(cluster.topic, member.user_id), used_ids)
            members.append(member)

        nodes.append(MindmapNode(
            id=topic_id,
            type=NodeType.TOPIC,
            label=cluster.topic,
            x=topic_x,
            y=topic_y,
            size=TOPIC_SIZE,
            color=topic_color,
            data=TopicData(user_count=len(members)),
        ))
        connections.append(MindmapConnection(CENTER_ID, topic_id, 1))

        user_positions = calculate_user_positions(
            len(members), topic_x, topic_y, radii.user_radius,
            start_angle=ci * CLUSTER_ROTATION_STEP,
        )
        for member, (ux, uy) in zip(members, user_positions):
            uid = node_ids[(ci, member.user_id)]
            nodes.append(MindmapNode(
                id=uid,
                type=NodeType.USER,
                label=member.user_name,
                x=ux,
                y=uy,
                size=user_node_size(member.modules),
                color=topic_color,
                data=UserData(
                    user_id=member.user_id,
                    user_name=member.user_name,
                    user_bio=member.user_bio,
                    modules=list(member.modules),
                    topic_id=topic_id,
                ),
            ))
            connections.append(MindmapConnection(topic_id, uid, 1))

    connections.extend(_shared_topic_connections(clusters, node_ids))

    logger.debug(
        f"Generated layout: {len(clusters)} topics, {len(nodes)} nodes, "
        f"{len(connections)} connections for {viewport.width:.0f}x{viewport.height:.0f}"
    )
    return Layout(nodes=nodes, connections=connections)
