"""
Normalization of NiceGUI event payloads.

NiceGUI hands handlers either event argument objects or raw `args`
values whose shape depends on which keys (or js_handler) the binding
requested. These helpers reduce them to plain numbers so the controller
never sees UI types.
"""

from typing import Any, List, Optional, Tuple

# Collects touch points as [[clientX, clientY], ...]
TOUCH_JS_HANDLER = '(e) => emit(Array.from(e.touches).map(t => [t.clientX, t.clientY]))'


def _raw(event: Any) -> Any:
    return event.args if hasattr(event, 'args') else event


def _number(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def normalize_pointer_payload(event: Any) -> Optional[Tuple[float, float]]:
    """(x, y) from a mouse event, or None when the payload has no position."""
    if hasattr(event, 'image_x') and hasattr(event, 'image_y'):
        return float(event.image_x), float(event.image_y)

    raw = _raw(event)
    if isinstance(raw, (list, tuple)) and len(raw) >= 2:
        x, y = _number(raw[0]), _number(raw[1])
    elif isinstance(raw, dict):
        x = _number(raw.get('image_x', raw.get('offsetX', raw.get('x'))))
        y = _number(raw.get('image_y', raw.get('offsetY', raw.get('y'))))
    else:
        return None
    if x is None or y is None:
        return None
    return x, y


def normalize_wheel_payload(event: Any) -> float:
    """deltaY from a wheel event; 0 when missing."""
    raw = _raw(event)
    if isinstance(raw, dict):
        value = raw.get('deltaY', 0)
    elif isinstance(raw, (list, tuple)) and raw:
        value = raw[0]
    else:
        value = raw
    number = _number(value)
    return number if number is not None else 0.0


def _touch_point(raw: Any) -> Optional[Tuple[float, float]]:
    if isinstance(raw, dict):
        x, y = _number(raw.get('clientX')), _number(raw.get('clientY'))
    elif isinstance(raw, (list, tuple)) and len(raw) >= 2:
        x, y = _number(raw[0]), _number(raw[1])
    else:
        return None
    if x is None or y is None:
        return None
    return x, y


def normalize_touch_payload(event: Any) -> List[Tuple[float, float]]:
    """
    Touch points from a touch event. Accepts a list of points, a dict with a
    `touches` entry, or a TouchList serialized as {"0": {...}, "1": {...}}.
    Unreadable points are dropped.
    """
    raw = _raw(event)
    if isinstance(raw, dict):
        if 'touches' in raw:
            raw = raw['touches']
        if isinstance(raw, dict):
            raw = [raw[k] for k in sorted(raw, key=lambda k: int(k) if str(k).isdigit() else 0)
                   if str(k).isdigit()]
    if not isinstance(raw, (list, tuple)):
        return []
    points = []
    for item in raw:
        point = _touch_point(item)
        if point is not None:
            points.append(point)
    return points
