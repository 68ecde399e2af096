"""
Shared constants for the mindmap engine.

These values are used by the controller, the renderer and the NiceGUI
view. The zoom bounds apply to every zoom path (wheel, pinch, buttons).
"""

# Zoom clamp
MIN_ZOOM = 0.3
MAX_ZOOM = 3.0

# Multiplicative zoom steps
WHEEL_ZOOM_OUT = 0.9
WHEEL_ZOOM_IN = 1.1
BUTTON_ZOOM_IN = 1.2
BUTTON_ZOOM_OUT = 0.8

# Fallback viewport used before the container has been measured
DEFAULT_WIDTH = 1200.0
DEFAULT_HEIGHT = 800.0

# Default ring radii (pixels in layout space)
DEFAULT_CENTER_RADIUS = 250.0
DEFAULT_TOPIC_RADIUS = 120.0
DEFAULT_USER_RADIUS = 80.0

# Rotation offset applied per cluster to its member ring (radians)
CLUSTER_ROTATION_STEP = 0.3

# Node diameters
CENTER_SIZE = 80.0
TOPIC_SIZE = 60.0
USER_BASE_SIZE = 40.0
USER_SIZE_PER_EXTRA_MODULE = 4.0
USER_MAX_SIZE = 56.0

CENTER_LABEL = 'learning network'
CENTER_ID = 'center'

# Greyscale palette cycled across topics
TOPIC_COLORS = ['#000', '#333', '#666', '#999']
CENTER_COLOR = '#000'
USER_COLOR = '#fff'

# Pointer movement (screen pixels) below which a node drag counts as a click
CLICK_SLOP = 3.0

# Connection curvature as a fraction of the distance between endpoints
CURVATURE = 0.1

# Strength marker radius: min(strength * STRENGTH_MARKER_SCALE, STRENGTH_MARKER_CAP)
STRENGTH_MARKER_SCALE = 2.0
STRENGTH_MARKER_CAP = 8.0

# Spring used to animate displayed zoom/pan/positions towards their targets
SPRING_STIFFNESS = 300.0
SPRING_DAMPING = 30.0
FRAME_INTERVAL = 1 / 60

# Orbital variant
ORBIT_TICK_SECONDS = 0.05
ORBIT_DEGREES_PER_TICK = 0.5
ORBIT_MAX_MEMBERS = 8
ORBIT_PLACEHOLDER_COUNT = 6
