"""
Learning-network mindmap.

This package turns topic clusters into an interactive radial graph:
- layout: pure radial layout engine
- highlight: hover/focus propagation over the connection index
- controller: MindmapController interaction state machine
- renderer: scene dicts and SVG markup
- view: NiceGUI hosts (imported separately, it needs a running UI)

Usage:
    from mindmap import MindmapController, generate_layout
"""

from mindmap.controller import MindmapController, MindmapSnapshot, MindmapState
from mindmap.layout import calculate_initial_zoom, generate_layout
from mindmap.models import (
    Cluster,
    ClusterMember,
    LayoutRadii,
    MindmapConnection,
    MindmapNode,
    NodeType,
    Viewport,
)
from mindmap.orbital import OrbitalController

__all__ = [
    'MindmapController',
    'MindmapSnapshot',
    'MindmapState',
    'OrbitalController',
    'generate_layout',
    'calculate_initial_zoom',
    'Cluster',
    'ClusterMember',
    'LayoutRadii',
    'MindmapConnection',
    'MindmapNode',
    'NodeType',
    'Viewport',
]
