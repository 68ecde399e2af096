import math

import pytest

from mindmap.orbital import (
    OrbitalController,
    OrbitalMember,
    hit_test,
    orbital_svg_content,
    placeholder_members,
    radius_for_width,
)


def members(count):
    return [{'id': f"m{i}", 'firstName': f"First{i}", 'lastName': f"Last{i}"} for i in range(count)]


def test_placeholders_when_no_members():
    controller = OrbitalController([])
    assert len(controller.members) == 6
    assert all(m.is_placeholder for m in controller.members)
    assert controller.members == placeholder_members()


def test_members_capped_at_eight():
    controller = OrbitalController(members(12))
    assert [m.id for m in controller.members] == [f"m{i}" for i in range(8)]


def test_member_from_wire_dict():
    member = OrbitalMember.from_dict({'id': 'u1', 'firstName': 'ada', 'lastName': 'lovelace',
                                      'aiProficiency': 80})
    assert member.initials == 'AL'
    assert member.ai_proficiency == 80
    assert not member.is_placeholder


@pytest.mark.parametrize('width, radius', [(320, 120), (639, 120), (640, 150), (767, 150), (768, 200), (1920, 200)])
def test_radius_by_width(width, radius):
    assert radius_for_width(width) == radius


def test_tick_advances_rotation():
    controller = OrbitalController(members(3))
    controller.tick()
    controller.tick()
    assert controller.rotation == pytest.approx(1.0)


def test_rotation_wraps():
    controller = OrbitalController(members(3))
    controller.rotation = 359.8
    controller.tick()
    assert controller.rotation == pytest.approx(0.3)


def test_hover_center_pauses_rotation():
    controller = OrbitalController(members(3))
    controller.hover('center')
    controller.tick()
    assert controller.rotation == 0.0
    controller.hover(None)
    controller.tick()
    assert controller.rotation == pytest.approx(0.5)


def test_select_toggles():
    controller = OrbitalController(members(3))
    assert controller.select('m1') == 'm1'
    assert controller.select('m2') == 'm2'
    assert controller.select('m2') is None
    controller.select('m0')
    assert controller.select(None) is None


def test_stale_selection_cleared_on_new_members():
    controller = OrbitalController(members(3))
    controller.select('m2')
    controller.set_members(members(2))
    assert controller.selected_id is None


def test_click_center_fires_callback():
    clicks = []
    controller = OrbitalController(members(2), on_upload_click=lambda: clicks.append(True))
    controller.click_center()
    assert clicks == [True]


def test_positions_evenly_spaced():
    controller = OrbitalController(members(4), width=1024)
    positions = controller.node_positions()
    assert [p.angle for p in positions] == [0, 90, 180, 270]
    assert (positions[0].x, positions[0].y) == (pytest.approx(200), pytest.approx(0))
    assert (positions[1].x, positions[1].y) == (pytest.approx(0, abs=1e-9), pytest.approx(200))
    for p in positions:
        assert math.hypot(p.x, p.y) == pytest.approx(200)


def test_positions_follow_rotation():
    controller = OrbitalController(members(4), width=1024)
    controller.rotation = 45
    assert controller.node_positions()[0].angle == 45


def test_hit_test():
    controller = OrbitalController(members(4), width=1024)
    assert hit_test(controller, 0, 0) == 'center'
    assert hit_test(controller, 200, 5) == 'm0'
    assert hit_test(controller, 100, 100) is None


def test_svg_content():
    controller = OrbitalController(members(2))
    controller.select('m1')
    svg = orbital_svg_content(controller, 640, 600)
    assert 'UPLOAD' in svg
    assert 'data-member-id="m0"' in svg
    assert '<animate' in svg

    controller.hover('center')
    assert '<animate' not in orbital_svg_content(controller, 640, 600)


def test_resize_updates_radius():
    controller = OrbitalController(members(2), width=1024)
    assert controller.resize(500) == 120
    assert math.hypot(controller.node_positions()[0].x, controller.node_positions()[0].y) == pytest.approx(120)


def test_hovering_a_member_pauses_rotation():
    controller = OrbitalController(members(4), width=1024)
    target = hit_test(controller, 200, 0)
    assert target == 'm0'
    controller.hover(target)
    controller.tick()
    assert controller.rotation == 0.0
    assert controller.hovered_id == 'm0'
    # Member stays under the pointer while paused
    assert hit_test(controller, 200, 0) == 'm0'

    controller.hover(None)
    controller.tick()
    assert controller.rotation == pytest.approx(0.5)
