from types import SimpleNamespace

from mindmap.events import (
    normalize_pointer_payload,
    normalize_touch_payload,
    normalize_wheel_payload,
)


def test_pointer_from_mouse_event_args():
    event = SimpleNamespace(type='mousedown', image_x=12, image_y=34)
    assert normalize_pointer_payload(event) == (12.0, 34.0)


def test_pointer_from_raw_args():
    assert normalize_pointer_payload(SimpleNamespace(args={'offsetX': 5, 'offsetY': 6})) == (5.0, 6.0)
    assert normalize_pointer_payload([1, 2]) == (1.0, 2.0)
    assert normalize_pointer_payload({'x': '3', 'y': '4'}) == (3.0, 4.0)


def test_pointer_without_position():
    assert normalize_pointer_payload({'foo': 1}) is None
    assert normalize_pointer_payload('node-1') is None
    assert normalize_pointer_payload(None) is None


def test_wheel_payloads():
    assert normalize_wheel_payload(SimpleNamespace(args=120)) == 120.0
    assert normalize_wheel_payload({'deltaY': -53.5}) == -53.5
    assert normalize_wheel_payload([100]) == 100.0
    assert normalize_wheel_payload(None) == 0.0
    assert normalize_wheel_payload({}) == 0.0


def test_touch_payloads():
    assert normalize_touch_payload(SimpleNamespace(args=[[0, 0], [3, 4]])) == [(0.0, 0.0), (3.0, 4.0)]
    assert normalize_touch_payload({'touches': [{'clientX': 1, 'clientY': 2}]}) == [(1.0, 2.0)]
    serialized = {'1': {'clientX': 5, 'clientY': 6}, '0': {'clientX': 1, 'clientY': 2}, 'length': 2}
    assert normalize_touch_payload(serialized) == [(1.0, 2.0), (5.0, 6.0)]


def test_touch_drops_unreadable_points():
    assert normalize_touch_payload([[0, 0], 'junk', [1]]) == [(0.0, 0.0)]
    assert normalize_touch_payload(None) == []
