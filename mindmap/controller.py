"""
Mindmap Controller - Single source of truth for mindmap interaction state.

The controller owns the node/connection lists and the view state
(zoom, pan, hover, focus, drags). Pointer, wheel and touch events from
the UI are translated into state transitions here; the renderer only
ever reads a snapshot.

Every transition completes synchronously, so the target state can be
read right after calling a handler. Animation towards that target is the
view's business (see mindmap.animation).
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence, Tuple

from mindmap.constants import (
    BUTTON_ZOOM_IN,
    BUTTON_ZOOM_OUT,
    CLICK_SLOP,
    WHEEL_ZOOM_IN,
    WHEEL_ZOOM_OUT,
)
from mindmap.highlight import ConnectionIndex, active_node_id
from mindmap.layout import calculate_initial_zoom, clamp_zoom, filter_clusters, generate_layout
from mindmap.models import (
    Cluster,
    LayoutRadii,
    MindmapConnection,
    MindmapNode,
    NodeType,
    UserData,
    Viewport,
    coerce_clusters,
)

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass
class MindmapState:
    """Complete interaction state, inspectable in one place."""
    nodes: List[MindmapNode] = field(default_factory=list)
    connections: List[MindmapConnection] = field(default_factory=list)
    hover_id: Optional[str] = None
    focus_id: Optional[str] = None
    zoom: float = 1.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    dragging_canvas: bool = False
    drag_origin: Point = (0.0, 0.0)
    last_touch_distance: Optional[float] = None
    dragging_node_id: Optional[str] = None
    node_drag_start: Point = (0.0, 0.0)
    node_drag_offset: Point = (0.0, 0.0)
    viewport: Viewport = field(default_factory=Viewport)

    @property
    def pan(self) -> Point:
        return (self.pan_x, self.pan_y)


@dataclass(frozen=True)
class MindmapSnapshot:
    """Read-only view of the state handed to the renderer. Nodes are copies, so later drags do not move them."""
    nodes: Tuple[MindmapNode, ...]
    connections: Tuple[MindmapConnection, ...]
    hover_id: Optional[str]
    focus_id: Optional[str]
    active_id: Optional[str]
    related_ids: frozenset
    shared_pairs: Tuple[Tuple[str, str, Tuple[str, ...]], ...]
    zoom: float
    pan: Point
    viewport: Viewport
    focus_label: Optional[str] = None
    dragging_node_id: Optional[str] = None
    drag_preview: Point = (0.0, 0.0)


class MindmapController:
    """Translates UI events into transitions over MindmapState."""

    def __init__(self,
                 clusters=None,
                 viewport: Optional[Viewport] = None,
                 radii: Optional[LayoutRadii] = None,
                 selected_topic: Optional[str] = None,
                 on_user_click: Optional[Callable[[str], None]] = None,
                 on_state_change: Optional[Callable[[MindmapState], None]] = None):
        self._clusters: List[Cluster] = coerce_clusters(clusters)
        self._radii = radii or LayoutRadii()
        self._selected_topic = selected_topic
        self._on_user_click = on_user_click
        self._on_state_change = on_state_change
        self._state = MindmapState(viewport=viewport or Viewport())
        self._index = ConnectionIndex([], [])
        self.regenerate()

    @property
    def state(self) -> MindmapState:
        return self._state

    @property
    def clusters(self) -> List[Cluster]:
        return list(self._clusters)

    @property
    def selected_topic(self) -> Optional[str]:
        return self._selected_topic

    @property
    def radii(self) -> LayoutRadii:
        return self._radii

    def set_on_user_click(self, callback: Callable[[str], None]):
        self._on_user_click = callback

    def set_on_state_change(self, callback: Callable[[MindmapState], None]):
        self._on_state_change = callback

    def node(self, node_id: Optional[str]) -> Optional[MindmapNode]:
        if not node_id:
            return None
        for node in self._state.nodes:
            if node.id == node_id:
                return node
        return None

    # --- Structural input ---

    def set_clusters(self, clusters) -> MindmapState:
        self._clusters = coerce_clusters(clusters)
        return self.regenerate()

    def set_selected_topic(self, topic: Optional[str]) -> MindmapState:
        self._selected_topic = topic or None
        return self.regenerate()

    def resize(self, width: Optional[float], height: Optional[float]) -> MindmapState:
        viewport = Viewport.measured(width, height)
        if viewport == self._state.viewport:
            return self._state
        self._state = replace(self._state, viewport=viewport)
        return self.regenerate()

    def set_radii(self, radii: LayoutRadii) -> MindmapState:
        self._radii = radii
        return self.regenerate()

    def regenerate(self) -> MindmapState:
        """
        Replace the node/connection set with a fresh layout.

        Dragged positions are dropped, zoom goes back to the computed initial
        value, pan and focus are reset.
        """
        clusters = filter_clusters(self._clusters, self._selected_topic)
        layout = generate_layout(clusters, self._state.viewport, self._radii)
        self._state = MindmapState(
            nodes=layout.nodes,
            connections=layout.connections,
            zoom=calculate_initial_zoom(len(layout.nodes)),
            viewport=self._state.viewport,
        )
        self._index = ConnectionIndex(self._state.nodes, self._state.connections)
        logger.info(
            f"Mindmap regenerated: {len(layout.nodes)} nodes, {len(layout.connections)} connections, "
            f"topic filter={self._selected_topic!r}, zoom={self._state.zoom}"
        )
        self._notify_change()
        return self._state

    # --- Hover / click ---

    def hover(self, node_id: Optional[str]) -> MindmapState:
        if node_id is not None and self.node(node_id) is None:
            node_id = None
        if node_id == self._state.hover_id:
            return self._state
        self._state = replace(self._state, hover_id=node_id)
        self._notify_change()
        return self._state

    def click_node(self, node_id: str) -> MindmapState:
        node = self.node(node_id)
        if node is None:
            logger.debug(f"Click on unknown node '{node_id}' ignored")
            return self._state

        if node.type is NodeType.USER:
            if isinstance(node.data, UserData) and self._on_user_click:
                self._on_user_click(node.data.user_id)
            return self._state

        if node.type is NodeType.TOPIC:
            focus_id = None if self._state.focus_id == node_id else node_id
        else:
            focus_id = None

        self._state = replace(self._state, focus_id=focus_id)
        logger.debug(f"Focus -> {focus_id!r}")
        self._notify_change()
        return self._state

    def clear_focus(self) -> MindmapState:
        if self._state.focus_id is None:
            return self._state
        self._state = replace(self._state, focus_id=None)
        self._notify_change()
        return self._state

    # --- Coordinate transforms ---

    def layout_to_screen(self, x: float, y: float) -> Point:
        """Scale about the viewport center, then translate by pan."""
        s = self._state
        cx, cy = s.viewport.center
        return (cx + (x - cx) * s.zoom + s.pan_x, cy + (y - cy) * s.zoom + s.pan_y)

    def screen_to_layout(self, x: float, y: float) -> Point:
        s = self._state
        cx, cy = s.viewport.center
        return (cx + (x - s.pan_x - cx) / s.zoom, cy + (y - s.pan_y - cy) / s.zoom)

    def node_at(self, x: float, y: float) -> Optional[MindmapNode]:
        """Topmost visible node under a screen point."""
        lx, ly = self.screen_to_layout(x, y)
        hit = None
        hit_rank = -1
        order = {NodeType.USER: 0, NodeType.TOPIC: 1, NodeType.CENTER: 2}
        for node in self.visible_nodes():
            if math.hypot(lx - node.x, ly - node.y) <= node.size / 2:
                rank = order[node.type]
                if node.id in (self._state.hover_id, self._state.focus_id):
                    rank = 3
                if rank > hit_rank:
                    hit, hit_rank = node, rank
        return hit

    # --- Pointer ---

    def pointer_down(self, x: float, y: float) -> MindmapState:
        """A pointer-down is either on a node or on empty canvas, never both."""
        node = self.node_at(x, y)
        if node is not None:
            self._state = replace(
                self._state,
                dragging_canvas=False,
                dragging_node_id=node.id,
                node_drag_start=(x, y),
                node_drag_offset=(0.0, 0.0),
            )
        else:
            self._state = replace(
                self._state,
                dragging_canvas=True,
                dragging_node_id=None,
                drag_origin=(x - self._state.pan_x, y - self._state.pan_y),
            )
        self._notify_change()
        return self._state

    def pointer_move(self, x: float, y: float) -> MindmapState:
        s = self._state
        if s.dragging_canvas:
            self._state = replace(s, pan_x=x - s.drag_origin[0], pan_y=y - s.drag_origin[1])
            self._notify_change()
        elif s.dragging_node_id is not None:
            self._state = replace(
                s, node_drag_offset=(x - s.node_drag_start[0], y - s.node_drag_start[1])
            )
            self._notify_change()
        else:
            hit = self.node_at(x, y)
            self.hover(hit.id if hit else None)
        return self._state

    def pointer_up(self, x: float, y: float) -> MindmapState:
        s = self._state
        if s.dragging_canvas:
            self._state = replace(s, dragging_canvas=False)
            self._notify_change()
            return self._state

        if s.dragging_node_id is None:
            return self._state

        node_id = s.dragging_node_id
        dx, dy = x - s.node_drag_start[0], y - s.node_drag_start[1]
        self._state = replace(s, dragging_node_id=None, node_drag_offset=(0.0, 0.0))
        if math.hypot(dx, dy) <= CLICK_SLOP:
            return self.click_node(node_id)
        return self.drag_node(node_id, dx, dy)

    def pointer_leave(self) -> MindmapState:
        """Pointer left the canvas: soft-cancel any drag in progress."""
        s = self._state
        if not s.dragging_canvas and s.dragging_node_id is None and s.hover_id is None:
            return self._state
        self._state = replace(
            s,
            dragging_canvas=False,
            dragging_node_id=None,
            node_drag_offset=(0.0, 0.0),
            hover_id=None,
        )
        self._notify_change()
        return self._state

    def drag_node(self, node_id: str, dx: float, dy: float) -> MindmapState:
        """
        Commit a node drag. The screen offset is divided by zoom so the drag
        distance does not depend on the zoom level. Connections are untouched.
        """
        node = self.node(node_id)
        if node is None or node.is_center:
            return self._state
        node.x += dx / self._state.zoom
        node.y += dy / self._state.zoom
        logger.debug(f"Node '{node_id}' moved to ({node.x:.1f}, {node.y:.1f})")
        self._notify_change()
        return self._state

    # --- Zoom ---

    def _set_zoom(self, zoom: float) -> MindmapState:
        zoom = clamp_zoom(zoom)
        if zoom != self._state.zoom:
            self._state = replace(self._state, zoom=zoom)
            self._notify_change()
        return self._state

    def wheel(self, delta_y: float) -> MindmapState:
        factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
        return self._set_zoom(self._state.zoom * factor)

    def zoom_in(self) -> MindmapState:
        return self._set_zoom(self._state.zoom * BUTTON_ZOOM_IN)

    def zoom_out(self) -> MindmapState:
        return self._set_zoom(self._state.zoom * BUTTON_ZOOM_OUT)

    def touch_move(self, points: Sequence[Point]) -> MindmapState:
        """
        Two-finger pinch. Fewer than two touch points cancels the pinch so
        the next two-finger move starts a fresh measurement.
        """
        if len(points) < 2:
            if self._state.last_touch_distance is not None:
                self._state = replace(self._state, last_touch_distance=None)
            return self._state

        (x1, y1), (x2, y2) = points[0], points[1]
        distance = math.hypot(x2 - x1, y2 - y1)
        last = self._state.last_touch_distance
        zoom = self._state.zoom
        if last:
            zoom = clamp_zoom(zoom * (distance / last))
        self._state = replace(self._state, zoom=zoom, last_touch_distance=distance or None)
        self._notify_change()
        return self._state

    def touch_end(self) -> MindmapState:
        self._state = replace(self._state, last_touch_distance=None)
        return self._state

    def reset_view(self) -> MindmapState:
        self._state = replace(self._state, zoom=1.0, pan_x=0.0, pan_y=0.0, focus_id=None)
        self._notify_change()
        return self._state

    # --- Derived views ---

    def visible_nodes(self) -> List[MindmapNode]:
        return self._index.visible_nodes(self._state.focus_id)

    def visible_connections(self) -> List[MindmapConnection]:
        return self._index.visible_connections(self._state.focus_id)

    def snapshot(self) -> MindmapSnapshot:
        s = self._state
        active = active_node_id(s.hover_id, s.focus_id)
        focused = self.node(s.focus_id)
        return MindmapSnapshot(
            nodes=tuple(replace(n) for n in self.visible_nodes()),
            connections=tuple(self.visible_connections()),
            hover_id=s.hover_id,
            focus_id=s.focus_id,
            active_id=active,
            related_ids=frozenset(self._index.related_node_ids(active)),
            shared_pairs=tuple(
                (a, b, tuple(shared)) for a, b, shared in self._index.shared_topic_pairs(active)
            ),
            zoom=s.zoom,
            pan=s.pan,
            viewport=s.viewport,
            focus_label=focused.label if focused else None,
            dragging_node_id=s.dragging_node_id,
            drag_preview=(s.node_drag_offset[0] / s.zoom, s.node_drag_offset[1] / s.zoom),
        )

    def _notify_change(self):
        if self._on_state_change:
            self._on_state_change(self._state)
