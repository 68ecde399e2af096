"""
Frame-driven interpolation of the displayed view towards the controller's
target state.

The controller's state is authoritative. The animator only produces what
is drawn on the current frame: each animated value is a damped spring
chasing its target, advanced by the frame delta.
"""

import math
from dataclasses import dataclass, replace
from typing import Dict

from mindmap.constants import FRAME_INTERVAL, SPRING_DAMPING, SPRING_STIFFNESS
from mindmap.controller import MindmapSnapshot

# Below these the spring is considered settled and snaps to its target
_SETTLE_DISTANCE = 1e-3
_SETTLE_VELOCITY = 1e-2


@dataclass
class Spring:
    """Unit-mass damped spring, integrated with semi-implicit Euler."""
    value: float
    target: float = None
    velocity: float = 0.0
    stiffness: float = SPRING_STIFFNESS
    damping: float = SPRING_DAMPING

    def __post_init__(self):
        if self.target is None:
            self.target = self.value

    @property
    def settled(self) -> bool:
        return (abs(self.target - self.value) < _SETTLE_DISTANCE
                and abs(self.velocity) < _SETTLE_VELOCITY)

    def step(self, dt: float) -> float:
        if not math.isfinite(dt) or dt <= 0:
            return self.value
        # Sub-step so a long frame cannot blow up the integration
        steps = max(1, math.ceil(dt / FRAME_INTERVAL))
        h = dt / steps
        for _ in range(steps):
            accel = self.stiffness * (self.target - self.value) - self.damping * self.velocity
            self.velocity += accel * h
            self.value += self.velocity * h
        if self.settled:
            self.value = self.target
            self.velocity = 0.0
        return self.value

    def snap(self):
        self.value = self.target
        self.velocity = 0.0


class ViewAnimator:
    """Springs for zoom, pan and per-node positions."""

    def __init__(self, snapshot: MindmapSnapshot):
        self._zoom = Spring(snapshot.zoom)
        self._pan_x = Spring(snapshot.pan[0])
        self._pan_y = Spring(snapshot.pan[1])
        self._positions: Dict[str, tuple] = {}
        self._target = snapshot
        self.retarget(snapshot, snap_new_nodes=True)

    @property
    def settled(self) -> bool:
        springs = [self._zoom, self._pan_x, self._pan_y]
        for sx, sy in self._positions.values():
            springs.extend((sx, sy))
        return all(s.settled for s in springs)

    def retarget(self, snapshot: MindmapSnapshot, snap_new_nodes: bool = True):
        self._target = snapshot
        self._zoom.target = snapshot.zoom
        self._pan_x.target = snapshot.pan[0]
        self._pan_y.target = snapshot.pan[1]

        current = {}
        for node in snapshot.nodes:
            springs = self._positions.get(node.id)
            if springs is None:
                springs = (Spring(node.x), Spring(node.y))
            springs[0].target = node.x
            springs[1].target = node.y
            if snap_new_nodes and node.id not in self._positions:
                springs[0].snap()
                springs[1].snap()
            current[node.id] = springs
        self._positions = current

    def jump(self):
        """Skip the animation: every value takes its target immediately."""
        self._zoom.snap()
        self._pan_x.snap()
        self._pan_y.snap()
        for sx, sy in self._positions.values():
            sx.snap()
            sy.snap()

    def step(self, dt: float) -> MindmapSnapshot:
        """Advance by dt seconds and return the snapshot to draw this frame."""
        zoom = self._zoom.step(dt)
        pan = (self._pan_x.step(dt), self._pan_y.step(dt))

        nodes = []
        for node in self._target.nodes:
            sx, sy = self._positions[node.id]
            x, y = sx.step(dt), sy.step(dt)
            if (x, y) == (node.x, node.y):
                nodes.append(node)
            else:
                nodes.append(replace(node, x=x, y=y))

        return replace(self._target, nodes=tuple(nodes), zoom=zoom, pan=pan)
