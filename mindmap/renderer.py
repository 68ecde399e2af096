"""
Mindmap renderer - turns a controller snapshot into a drawable scene.

The scene is a plain dict (connections, nodes, tooltip, overlays) so it can
be inspected in tests. scene_to_svg_content() turns it into SVG markup for the
NiceGUI view. Nothing here mutates the snapshot.

Connection styling precedence:
    highlighted (touches the active node)
    > related (touches a one-hop neighbour of the active node)
    > center edge > topic edge > default
"""

import html
import math
from typing import Any, Dict, List, Optional, Tuple

from mindmap.constants import (
    CURVATURE,
    STRENGTH_MARKER_CAP,
    STRENGTH_MARKER_SCALE,
)
from mindmap.controller import MindmapSnapshot
from mindmap.highlight import is_connection_highlighted, is_connection_related
from mindmap.models import MindmapConnection, MindmapNode, NodeType, TopicData, UserData, Viewport

_DEFAULT_EDGE_COLOR = '#ddd'
_SHARED_TOPIC_COLOR = '#FFD700'
_BACKGROUND = '#fafafa'
_HOT_SCALE = 1.2
_TOOLTIP_GAP = 12
_PARTICLE_RADIUS = 4
_PARTICLE_DURATION = '2s'


def curve_path(x1: float, y1: float, x2: float, y2: float) -> Dict[str, Any]:
    """
    Quadratic curve between two points with the control point pushed
    perpendicular to the segment by CURVATURE * distance.

    Coincident endpoints give a zero-length straight path instead of NaN.
    """
    mid_x = (x1 + x2) / 2
    mid_y = (y1 + y2) / 2
    dx, dy = x2 - x1, y2 - y1
    distance = math.hypot(dx, dy)

    if distance == 0:
        control_x, control_y = mid_x, mid_y
    else:
        curvature = distance * CURVATURE
        control_x = mid_x + (-dy / distance) * curvature
        control_y = mid_y + (dx / distance) * curvature

    return {
        'd': f"M {x1:.2f} {y1:.2f} Q {control_x:.2f} {control_y:.2f} {x2:.2f} {y2:.2f}",
        'midpoint': (mid_x, mid_y),
        'control': (control_x, control_y),
        'length': distance,
    }


def connection_style(from_node: MindmapNode, to_node: MindmapNode,
                     highlighted: bool, related: bool) -> Dict[str, Any]:
    is_center_edge = from_node.is_center or to_node.is_center
    is_topic_edge = from_node.type is NodeType.TOPIC or to_node.type is NodeType.TOPIC

    if highlighted:
        return {'kind': 'highlighted', 'width': 4, 'color': from_node.color or to_node.color or '#000', 'opacity': 0.8}
    if related:
        return {'kind': 'related', 'width': 2, 'color': from_node.color or to_node.color or '#666', 'opacity': 0.5}
    if is_center_edge:
        return {'kind': 'center', 'width': 2, 'color': to_node.color or '#666', 'opacity': 0.4}
    if is_topic_edge:
        return {'kind': 'topic', 'width': 1.5, 'color': from_node.color or to_node.color or '#ccc', 'opacity': 0.3}
    return {'kind': 'default', 'width': 1, 'color': _DEFAULT_EDGE_COLOR, 'opacity': 0.3}


def strength_marker_radius(strength: int) -> float:
    return min(strength * STRENGTH_MARKER_SCALE, STRENGTH_MARKER_CAP)


def _positions(snapshot: MindmapSnapshot) -> Dict[str, MindmapNode]:
    """Nodes by id, with an in-progress node drag shown at its preview spot."""
    nodes = {}
    dx, dy = snapshot.drag_preview
    for node in snapshot.nodes:
        if node.id == snapshot.dragging_node_id and not node.is_center and (dx or dy):
            node = MindmapNode(node.id, node.type, node.label, node.x + dx, node.y + dy,
                               node.size, node.color, node.data)
        nodes[node.id] = node
    return nodes


def render_connections(snapshot: MindmapSnapshot,
                       nodes_by_id: Optional[Dict[str, MindmapNode]] = None) -> List[Dict[str, Any]]:
    nodes_by_id = nodes_by_id if nodes_by_id is not None else _positions(snapshot)
    active = snapshot.active_id
    related_ids = snapshot.related_ids
    rendered = []

    for index, conn in enumerate(snapshot.connections):
        from_node = nodes_by_id.get(conn.from_id)
        to_node = nodes_by_id.get(conn.to_id)
        # Stale reference (filtered out by focus, or regenerated away)
        if from_node is None or to_node is None:
            continue

        highlighted = is_connection_highlighted(conn, active)
        related = bool(active) and is_connection_related(conn, related_ids)
        style = connection_style(from_node, to_node, highlighted, related)
        path = curve_path(from_node.x, from_node.y, to_node.x, to_node.y)

        marker = None
        if conn.strength > 1 and not highlighted:
            marker = {
                'cx': path['midpoint'][0],
                'cy': path['midpoint'][1],
                'r': strength_marker_radius(conn.strength),
                'color': style['color'],
                'opacity': style['opacity'] * 0.6,
            }

        rendered.append({
            'key': f"conn-{index}",
            'from': conn.from_id,
            'to': conn.to_id,
            'strength': conn.strength,
            'path': path['d'],
            'style': style,
            'glow': highlighted,
            'particle': {'r': _PARTICLE_RADIUS, 'color': style['color'], 'duration': _PARTICLE_DURATION}
            if highlighted and path['length'] > 0 else None,
            'marker': marker,
        })
    return rendered


def render_shared_topic_lines(snapshot: MindmapSnapshot,
                              nodes_by_id: Optional[Dict[str, MindmapNode]] = None) -> List[Dict[str, Any]]:
    """Dashed lines from an active user to related users learning the same topics."""
    nodes_by_id = nodes_by_id if nodes_by_id is not None else _positions(snapshot)
    lines = []
    for active_id, related_id, shared in snapshot.shared_pairs:
        a = nodes_by_id.get(active_id)
        b = nodes_by_id.get(related_id)
        if a is None or b is None:
            continue
        lines.append({
            'key': f"shared-{active_id}-{related_id}",
            'x1': a.x, 'y1': a.y, 'x2': b.x, 'y2': b.y,
            'color': _SHARED_TOPIC_COLOR,
            'shared': list(shared),
        })
    return lines


def node_style(node: MindmapNode, hovered: bool, focused: bool) -> Dict[str, Any]:
    hot = hovered or focused
    if node.type is NodeType.CENTER:
        style = {'fill': '#000', 'stroke': '#666' if hovered else '#000', 'stroke_width': 4,
                 'text_color': '#fff', 'font_size': 14, 'font_weight': 900}
    elif node.type is NodeType.TOPIC:
        style = {'fill': '#333' if hot else (node.color or '#666'), 'stroke': '#000', 'stroke_width': 3,
                 'text_color': '#fff', 'font_size': 12, 'font_weight': 700}
    else:
        style = {'fill': '#000' if hot else '#fff', 'stroke': '#000', 'stroke_width': 2,
                 'text_color': '#fff' if hot else '#000', 'font_size': 11, 'font_weight': 700}

    if hot:
        z = 100
    elif node.type is NodeType.CENTER:
        z = 50
    elif node.type is NodeType.TOPIC:
        z = 30
    else:
        z = 10

    style['scale'] = _HOT_SCALE if hot else 1.0
    style['z'] = z
    return style


def node_label(node: MindmapNode) -> str:
    if node.type is NodeType.CENTER:
        return node.label.upper()
    return node.label.lower()


def render_nodes(snapshot: MindmapSnapshot,
                 nodes_by_id: Optional[Dict[str, MindmapNode]] = None) -> List[Dict[str, Any]]:
    nodes_by_id = nodes_by_id if nodes_by_id is not None else _positions(snapshot)
    rendered = []
    for order, node in enumerate(nodes_by_id.values()):
        hovered = node.id == snapshot.hover_id
        focused = node.id == snapshot.focus_id
        rendered.append({
            'id': node.id,
            'type': node.type.value,
            'label': node_label(node),
            'x': node.x,
            'y': node.y,
            'radius': node.size / 2,
            'hovered': hovered,
            'focused': focused,
            'draggable': not node.is_center,
            'pulse': node.is_center,
            'order': order,
            'style': node_style(node, hovered, focused),
        })
    # Stable sort: equal z keeps layout order
    rendered.sort(key=lambda n: n['style']['z'])
    return rendered


def render_tooltip(snapshot: MindmapSnapshot,
                   nodes_by_id: Optional[Dict[str, MindmapNode]] = None) -> Optional[Dict[str, Any]]:
    """Info box anchored below the hovered user or topic node."""
    nodes_by_id = nodes_by_id if nodes_by_id is not None else _positions(snapshot)
    node = nodes_by_id.get(snapshot.hover_id) if snapshot.hover_id else None
    if node is None or node.is_center:
        return None

    scale = node_style(node, True, node.id == snapshot.focus_id)['scale']
    anchor = (node.x, node.y + node.size * scale / 2 + _TOOLTIP_GAP)

    if isinstance(node.data, UserData):
        lines = [{'text': node.data.user_name, 'weight': 700}]
        if node.data.user_bio:
            lines.append({'text': node.data.user_bio, 'weight': 400})
        if len(node.data.modules) > 1:
            lines.append({'text': f"Learning {len(node.data.modules)} topics", 'weight': 600})
        theme = 'light'
    elif isinstance(node.data, TopicData):
        count = node.data.user_count
        lines = [{'text': f"{count} learner{'s' if count != 1 else ''}", 'weight': 700}]
        theme = 'dark'
    else:
        return None

    return {
        'node_id': node.id,
        'x': anchor[0],
        'y': anchor[1],
        'lines': lines,
        'theme': theme,
        'pointer_events': 'none',
    }


def render_focus_banner(snapshot: MindmapSnapshot) -> Optional[Dict[str, Any]]:
    if not snapshot.focus_id:
        return None
    return {'node_id': snapshot.focus_id, 'label': snapshot.focus_label or snapshot.focus_id}


def build_scene(snapshot: MindmapSnapshot) -> Dict[str, Any]:
    nodes_by_id = _positions(snapshot)
    return {
        'connections': render_connections(snapshot, nodes_by_id),
        'shared_lines': render_shared_topic_lines(snapshot, nodes_by_id),
        'nodes': render_nodes(snapshot, nodes_by_id),
        'tooltip': render_tooltip(snapshot, nodes_by_id),
        'focus_banner': render_focus_banner(snapshot),
        'zoom': snapshot.zoom,
        'pan': snapshot.pan,
        'viewport': (snapshot.viewport.width, snapshot.viewport.height),
    }


# --- SVG output ---

_SVG_DEFS = '''
<defs>
    <filter id="glow" x="-50%" y="-50%" width="200%" height="200%">
        <feGaussianBlur stdDeviation="3" result="coloredBlur" />
        <feMerge><feMergeNode in="coloredBlur" /><feMergeNode in="SourceGraphic" /></feMerge>
    </filter>
    <linearGradient id="animatedGradient" x1="0%" y1="0%" x2="100%" y2="0%">
        <stop offset="0%" stop-color="#000" stop-opacity="0.8">
            <animate attributeName="stop-opacity" values="0.8;0.3;0.8" dur="2s" repeatCount="indefinite" />
        </stop>
        <stop offset="50%" stop-color="#000" stop-opacity="0.4">
            <animate attributeName="stop-opacity" values="0.4;0.8;0.4" dur="2s" repeatCount="indefinite" />
        </stop>
        <stop offset="100%" stop-color="#000" stop-opacity="0.8">
            <animate attributeName="stop-opacity" values="0.8;0.3;0.8" dur="2s" repeatCount="indefinite" />
        </stop>
    </linearGradient>
</defs>
'''


def _esc(value: Any) -> str:
    return html.escape(str(value), quote=True)


def _svg_connection(c: Dict[str, Any]) -> str:
    s = c['style']
    parts = []
    if c['glow']:
        parts.append(
            f'<path d="{c["path"]}" stroke="{_esc(s["color"])}" stroke-width="{s["width"] + 4}" '
            f'opacity="{s["opacity"] * 0.3:.2f}" fill="none" stroke-linecap="round" filter="url(#glow)" />'
        )
    stroke = 'url(#animatedGradient)' if c['glow'] else _esc(s['color'])
    parts.append(
        f'<path d="{c["path"]}" stroke="{stroke}" stroke-width="{s["width"]}" opacity="{s["opacity"]}" '
        f'fill="none" stroke-linecap="round" stroke-linejoin="round" />'
    )
    if c['particle']:
        p = c['particle']
        parts.append(
            f'<circle r="{p["r"]}" fill="{_esc(p["color"])}" filter="url(#glow)">'
            f'<animateMotion dur="{p["duration"]}" repeatCount="indefinite" path="{c["path"]}" /></circle>'
        )
    if c['marker']:
        m = c['marker']
        parts.append(
            f'<circle cx="{m["cx"]:.2f}" cy="{m["cy"]:.2f}" r="{m["r"]}" fill="{_esc(m["color"])}" '
            f'opacity="{m["opacity"]:.2f}" />'
        )
    return f'<g class="connection" data-from="{_esc(c["from"])}" data-to="{_esc(c["to"])}">{"".join(parts)}</g>'


def _svg_node(n: Dict[str, Any]) -> str:
    s = n['style']
    r = n['radius']
    transform = f'translate({n["x"]:.2f} {n["y"]:.2f}) scale({s["scale"]})'
    pulse = ''
    if n['pulse']:
        pulse = (
            f'<circle r="{r:.2f}" fill="none" stroke="#fff" stroke-width="2" pointer-events="none">'
            f'<animate attributeName="r" values="{r:.2f};{r * 1.3:.2f};{r:.2f}" dur="2s" repeatCount="indefinite" />'
            f'<animate attributeName="opacity" values="0.5;0;0.5" dur="2s" repeatCount="indefinite" />'
            f'</circle>'
        )
    return (
        f'<g class="mindmap-node" data-node-id="{_esc(n["id"])}" transform="{transform}">'
        f'<circle r="{r:.2f}" fill="{s["fill"]}" stroke="{s["stroke"]}" stroke-width="{s["stroke_width"]}" />'
        f'<text text-anchor="middle" dominant-baseline="central" fill="{s["text_color"]}" '
        f'font-size="{s["font_size"]}" font-weight="{s["font_weight"]}" pointer-events="none">'
        f'{_esc(n["label"])}</text>{pulse}</g>'
    )


def _svg_tooltip(t: Dict[str, Any]) -> str:
    dark = t['theme'] == 'dark'
    fill, text = ('#000', '#fff') if dark else ('#fff', '#000')
    line_height = 16
    width = max(120, max(len(line['text']) for line in t['lines']) * 6.5 + 24)
    height = len(t['lines']) * line_height + 16
    x = t['x'] - width / 2
    rows = []
    for i, line in enumerate(t['lines']):
        rows.append(
            f'<text x="{t["x"]:.2f}" y="{t["y"] + 8 + line_height * (i + 0.75):.2f}" text-anchor="middle" '
            f'fill="{text}" font-size="11" font-weight="{line["weight"]}">{_esc(line["text"])}</text>'
        )
    return (
        f'<g class="tooltip" pointer-events="none">'
        f'<rect x="{x:.2f}" y="{t["y"]:.2f}" width="{width:.2f}" height="{height}" rx="8" '
        f'fill="{fill}" stroke="#000" stroke-width="2" />{"".join(rows)}</g>'
    )


def view_transform(viewport: Viewport, zoom: float, pan: Tuple[float, float]) -> str:
    """Scale about the viewport center, then translate by pan."""
    cx, cy = viewport.center
    return (f'translate({cx + pan[0]:.2f} {cy + pan[1]:.2f}) scale({zoom:.4f}) '
            f'translate({-cx:.2f} {-cy:.2f})')


def scene_to_svg_content(scene: Dict[str, Any]) -> str:
    """Inner SVG elements, for hosts that supply their own <svg> element."""
    width, height = scene['viewport']
    viewport = Viewport(width, height)
    body = []
    for c in scene['connections']:
        body.append(_svg_connection(c))
    for line in scene['shared_lines']:
        body.append(
            f'<line x1="{line["x1"]:.2f}" y1="{line["y1"]:.2f}" x2="{line["x2"]:.2f}" y2="{line["y2"]:.2f}" '
            f'stroke="{line["color"]}" stroke-width="2" stroke-dasharray="4 4" opacity="0.6" filter="url(#glow)" />'
        )
    for n in scene['nodes']:
        body.append(_svg_node(n))
    if scene['tooltip']:
        body.append(_svg_tooltip(scene['tooltip']))

    return (
        f'{_SVG_DEFS}<rect width="{width:.0f}" height="{height:.0f}" fill="{_BACKGROUND}" />'
        f'<g transform="{view_transform(viewport, scene["zoom"], scene["pan"])}">{"".join(body)}</g>'
    )


def scene_to_svg(scene: Dict[str, Any]) -> str:
    """Standalone SVG document for a scene built by build_scene()."""
    width, height = scene['viewport']
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width:.0f} {height:.0f}" '
        f'width="{width:.0f}" height="{height:.0f}">{scene_to_svg_content(scene)}</svg>'
    )


def render_svg(snapshot: MindmapSnapshot) -> str:
    return scene_to_svg(build_scene(snapshot))
