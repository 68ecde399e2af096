"""
Graph data model for the learning-network mindmap.

Nodes are typed (center / topic / user) and carry a payload whose shape is
fixed by the node type. Connections are undirected and weighted.

Input to the layout engine is a list of clusters, each a topic with its
member users. The wire shape of a cluster (as produced by the learning API)
uses camelCase keys:

    {
      "topic": "AI",
      "users": [
        {"userId": "u1", "userName": "Ada", "userBio": "...", "modules": ["AI"]}
      ]
    }
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from mindmap.constants import (
    CENTER_COLOR,
    DEFAULT_CENTER_RADIUS,
    DEFAULT_HEIGHT,
    DEFAULT_TOPIC_RADIUS,
    DEFAULT_USER_RADIUS,
    DEFAULT_WIDTH,
    TOPIC_COLORS,
    USER_COLOR,
)


class NodeType(str, Enum):
    CENTER = 'center'
    TOPIC = 'topic'
    USER = 'user'


@dataclass(frozen=True)
class CenterData:
    """The center node carries no payload."""


@dataclass(frozen=True)
class TopicData:
    user_count: int = 0


@dataclass(frozen=True)
class UserData:
    user_id: str
    user_name: str
    user_bio: Optional[str] = None
    modules: List[str] = field(default_factory=list)
    topic_id: Optional[str] = None


NodeData = Union[CenterData, TopicData, UserData]

_PAYLOAD_TYPES = {
    NodeType.CENTER: CenterData,
    NodeType.TOPIC: TopicData,
    NodeType.USER: UserData,
}

_DEFAULT_COLORS = {
    NodeType.CENTER: CENTER_COLOR,
    NodeType.TOPIC: TOPIC_COLORS[0],
    NodeType.USER: USER_COLOR,
}


@dataclass
class MindmapNode:
    """
    A node in untransformed layout space (pre-zoom, pre-pan).

    x/y are mutable: a committed drag overrides them in place.
    """
    id: str
    type: NodeType
    label: str
    x: float
    y: float
    size: float
    color: Optional[str] = None
    data: NodeData = field(default_factory=CenterData)

    def __post_init__(self):
        self.type = NodeType(self.type)
        expected = _PAYLOAD_TYPES[self.type]
        if not isinstance(self.data, expected):
            raise TypeError(
                f"{self.type.value} node '{self.id}' needs {expected.__name__}, "
                f"got {type(self.data).__name__}"
            )
        if self.color is None:
            self.color = _DEFAULT_COLORS[self.type]

    @property
    def is_center(self) -> bool:
        return self.type is NodeType.CENTER

    @property
    def position(self):
        return (self.x, self.y)


@dataclass(frozen=True)
class MindmapConnection:
    """Undirected weighted edge. Rendering does not distinguish direction."""
    from_id: str
    to_id: str
    strength: int = 1

    def __post_init__(self):
        if self.strength < 1:
            raise ValueError(f"Connection strength must be >= 1, got {self.strength}")

    def touches(self, node_id: Optional[str]) -> bool:
        return node_id is not None and (self.from_id == node_id or self.to_id == node_id)

    def other(self, node_id: str) -> Optional[str]:
        if self.from_id == node_id:
            return self.to_id
        if self.to_id == node_id:
            return self.from_id
        return None


@dataclass
class ClusterMember:
    user_id: str
    user_name: str = ''
    user_bio: Optional[str] = None
    modules: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'ClusterMember':
        user_id = raw.get('userId', raw.get('user_id'))
        if not user_id:
            raise ValueError(f"Cluster member without userId: {raw!r}")
        return cls(
            user_id=str(user_id),
            user_name=raw.get('userName', raw.get('user_name')) or str(user_id),
            user_bio=raw.get('userBio', raw.get('user_bio')),
            modules=list(raw.get('modules') or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'userName': self.user_name,
            'userBio': self.user_bio,
            'modules': list(self.modules),
        }


@dataclass
class Cluster:
    """A topic and its member users; the unit of input to the layout engine."""
    topic: str
    users: List[ClusterMember] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Cluster':
        return cls(
            topic=str(raw.get('topic', '')),
            users=[ClusterMember.from_dict(u) for u in raw.get('users') or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'topic': self.topic, 'users': [u.to_dict() for u in self.users]}


@dataclass(frozen=True)
class Viewport:
    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT

    @classmethod
    def measured(cls, width: Optional[float], height: Optional[float]) -> 'Viewport':
        """Build from a measured container size; unmeasured (0/None) sides use the defaults."""
        return cls(
            width=float(width) if width and width > 0 else DEFAULT_WIDTH,
            height=float(height) if height and height > 0 else DEFAULT_HEIGHT,
        )

    @property
    def center(self):
        return (self.width / 2, self.height / 2)


@dataclass(frozen=True)
class LayoutRadii:
    """
    center_radius: distance from the viewport center to the topic ring.
    topic_radius: carried with the radii configuration; ring placement only
        uses center_radius and user_radius.
    user_radius: distance from a topic node to its member ring.
    """
    center_radius: float = DEFAULT_CENTER_RADIUS
    topic_radius: float = DEFAULT_TOPIC_RADIUS
    user_radius: float = DEFAULT_USER_RADIUS


@dataclass
class Layout:
    nodes: List[MindmapNode] = field(default_factory=list)
    connections: List[MindmapConnection] = field(default_factory=list)

    @property
    def center(self) -> Optional[MindmapNode]:
        for node in self.nodes:
            if node.is_center:
                return node
        return None

    def node(self, node_id: str) -> Optional[MindmapNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


def coerce_clusters(clusters) -> List[Cluster]:
    """Accept Cluster objects or their wire dicts."""
    result = []
    for c in clusters or []:
        result.append(c if isinstance(c, Cluster) else Cluster.from_dict(c))
    return result
