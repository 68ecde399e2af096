"""
Orbital network variant.

Members orbit a fixed central "upload" action node. A periodic timer
advances the rotation angle; hovering the center pauses it. Positions are
relative to the orbit center.
"""

import html
import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional

from mindmap.constants import (
    ORBIT_DEGREES_PER_TICK,
    ORBIT_MAX_MEMBERS,
    ORBIT_PLACEHOLDER_COUNT,
)

logger = logging.getLogger(__name__)

_PLACEHOLDER_FIRST = ['Alice', 'Bob', 'Carol', 'David', 'Emma', 'Frank']
_PLACEHOLDER_LAST = ['A', 'B', 'C', 'D', 'E', 'F']
_PLACEHOLDER_PROFICIENCY = [72, 45, 88, 30, 64, 51]


@dataclass(frozen=True)
class OrbitalMember:
    id: str
    first_name: str
    last_name: str = ''
    avatar_url: Optional[str] = None
    ai_proficiency: Optional[int] = None
    is_placeholder: bool = False

    @property
    def initials(self) -> str:
        return f"{self.first_name[:1]}{self.last_name[:1]}".upper()

    @classmethod
    def from_dict(cls, raw) -> 'OrbitalMember':
        return cls(
            id=str(raw.get('id')),
            first_name=raw.get('firstName', raw.get('first_name')) or '',
            last_name=raw.get('lastName', raw.get('last_name')) or '',
            avatar_url=raw.get('avatarUrl', raw.get('avatar_url')),
            ai_proficiency=raw.get('aiProficiency', raw.get('ai_proficiency')),
        )


@dataclass(frozen=True)
class OrbitalPosition:
    member: OrbitalMember
    x: float
    y: float
    angle: float


def placeholder_members() -> List[OrbitalMember]:
    return [
        OrbitalMember(
            id=f"placeholder-{i}",
            first_name=_PLACEHOLDER_FIRST[i],
            last_name=_PLACEHOLDER_LAST[i],
            ai_proficiency=_PLACEHOLDER_PROFICIENCY[i],
            is_placeholder=True,
        )
        for i in range(ORBIT_PLACEHOLDER_COUNT)
    ]


def radius_for_width(width: float) -> float:
    if width < 640:
        return 120.0
    if width < 768:
        return 150.0
    return 200.0


class OrbitalController:
    """Rotation, pause and selection state for the orbital view."""

    def __init__(self, members=None, width: float = 1024,
                 on_upload_click: Optional[Callable[[], None]] = None):
        self.rotation = 0.0
        self.paused = False
        self.hovered_id: Optional[str] = None
        self.selected_id: Optional[str] = None
        self.radius = radius_for_width(width)
        self._on_upload_click = on_upload_click
        self.members: List[OrbitalMember] = []
        self.set_members(members)

    def set_members(self, members) -> None:
        members = [m if isinstance(m, OrbitalMember) else OrbitalMember.from_dict(m) for m in members or []]
        self.members = members[:ORBIT_MAX_MEMBERS] if members else placeholder_members()
        if self.selected_id and all(m.id != self.selected_id for m in self.members):
            self.selected_id = None

    def set_on_upload_click(self, callback: Callable[[], None]):
        self._on_upload_click = callback

    def resize(self, width: float) -> float:
        self.radius = radius_for_width(width)
        return self.radius

    def tick(self) -> float:
        """Advance one timer step unless paused."""
        if not self.paused:
            self.rotation = (self.rotation + ORBIT_DEGREES_PER_TICK) % 360
        return self.rotation

    def hover(self, target: Optional[str]) -> None:
        """Hovering the center or any member pauses the rotation; None resumes it."""
        self.hovered_id = target
        self.paused = target is not None

    def click_center(self) -> None:
        logger.debug("Upload requested from orbital center")
        if self._on_upload_click:
            self._on_upload_click()

    def select(self, member_id: Optional[str]) -> Optional[str]:
        """Toggle selection of a member."""
        self.selected_id = None if member_id is None or member_id == self.selected_id else member_id
        return self.selected_id

    def node_positions(self) -> List[OrbitalPosition]:
        total = len(self.members)
        positions = []
        for index, member in enumerate(self.members):
            angle = index * 360 / total + self.rotation
            radians = math.radians(angle)
            positions.append(OrbitalPosition(
                member=member,
                x=math.cos(radians) * self.radius,
                y=math.sin(radians) * self.radius,
                angle=angle,
            ))
        return positions


def hit_test(controller: OrbitalController, x: float, y: float,
             center_radius: float = 48.0, member_radius: float = 28.0) -> Optional[str]:
    """
    Classify a point relative to the orbit center: 'center', a member id,
    or None for empty space.
    """
    if math.hypot(x, y) <= center_radius:
        return 'center'
    for pos in controller.node_positions():
        if math.hypot(x - pos.x, y - pos.y) <= member_radius:
            return pos.member.id
    return None


def orbital_svg_content(controller: OrbitalController, width: float, height: float,
                        center_radius: float = 48.0, member_radius: float = 28.0) -> str:
    """Inner SVG for the orbital view, centered in a width x height canvas."""
    cx, cy = width / 2, height / 2
    parts = [
        f'<circle cx="{cx:.2f}" cy="{cy:.2f}" r="{controller.radius:.2f}" fill="none" '
        f'stroke="rgba(0,0,0,0.1)" stroke-dasharray="4 6" />'
    ]
    for pos in controller.node_positions():
        mx, my = cx + pos.x, cy + pos.y
        selected = pos.member.id == controller.selected_id
        stroke = '#000' if selected else 'rgba(0,0,0,0.2)'
        parts.append(
            f'<line x1="{cx:.2f}" y1="{cy:.2f}" x2="{mx:.2f}" y2="{my:.2f}" stroke="{stroke}" '
            f'stroke-width="{2 if selected else 1}" />'
        )
    for pos in controller.node_positions():
        mx, my = cx + pos.x, cy + pos.y
        selected = pos.member.id == controller.selected_id
        fill = '#000' if selected else '#fff'
        text = '#fff' if selected else '#000'
        opacity = 0.5 if pos.member.is_placeholder else 1.0
        parts.append(
            f'<g class="orbital-member" data-member-id="{html.escape(pos.member.id)}" opacity="{opacity}">'
            f'<circle cx="{mx:.2f}" cy="{my:.2f}" r="{member_radius}" fill="{fill}" stroke="#000" stroke-width="2" />'
            f'<text x="{mx:.2f}" y="{my:.2f}" text-anchor="middle" dominant-baseline="central" '
            f'fill="{text}" font-size="12" font-weight="700">{html.escape(pos.member.initials)}</text>'
        )
        if selected and pos.member.ai_proficiency is not None:
            parts.append(
                f'<text x="{mx:.2f}" y="{my + member_radius + 14:.2f}" text-anchor="middle" '
                f'font-size="10" fill="#000">AI {pos.member.ai_proficiency}%</text>'
            )
        parts.append('</g>')

    pulse = '' if controller.paused else (
        f'<circle cx="{cx:.2f}" cy="{cy:.2f}" r="{center_radius}" fill="rgba(0,0,0,0.1)" pointer-events="none">'
        f'<animate attributeName="r" values="{center_radius};{center_radius * 1.5};{center_radius}" '
        f'dur="3s" repeatCount="indefinite" />'
        f'<animate attributeName="opacity" values="0.3;0;0.3" dur="3s" repeatCount="indefinite" /></circle>'
    )
    parts.append(
        f'{pulse}<g class="orbital-center"><circle cx="{cx:.2f}" cy="{cy:.2f}" r="{center_radius}" fill="#000" />'
        f'<text x="{cx:.2f}" y="{cy:.2f}" text-anchor="middle" dominant-baseline="central" fill="#fff" '
        f'font-size="12" font-weight="900">UPLOAD</text></g>'
    )
    return ''.join(parts)
