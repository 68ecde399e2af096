"""
NiceGUI hosts for the mindmap and the orbital variant.

The view owns no interaction state: it forwards DOM events to the
controller and redraws from the controller's snapshot. Drawing happens on
a frame timer that steps the ViewAnimator, so zoom/pan/position changes
ease in while the controller already holds the final values.
"""

import logging
import time
from typing import Callable, Optional

from nicegui import ui

from mindmap.animation import ViewAnimator
from mindmap.constants import FRAME_INTERVAL, ORBIT_TICK_SECONDS
from mindmap.controller import MindmapController, MindmapState
from mindmap.events import (
    TOUCH_JS_HANDLER,
    normalize_pointer_payload,
    normalize_touch_payload,
    normalize_wheel_payload,
)
from mindmap.orbital import OrbitalController, hit_test, orbital_svg_content
from mindmap.renderer import build_scene, render_focus_banner, scene_to_svg_content

logger = logging.getLogger(__name__)

# Render at 30 fps; the animator sub-steps internally
_FRAME_SECONDS = FRAME_INTERVAL * 2
_MEASURE_SECONDS = 1.0

_BUTTON_CLASSES = 'w-11 h-11 bg-white text-black border-2 border-black rounded-lg font-bold'


class MindmapView:
    """
    Interactive mindmap canvas.

    Usage:
        controller = MindmapController(clusters, on_user_click=show_user)
        MindmapView(controller).setup()
    """

    def __init__(self, controller: MindmapController, height: int = 600):
        self.controller = controller
        self.height = height
        self.animator = ViewAnimator(controller.snapshot())
        self._dirty = True
        self._last_frame = time.monotonic()
        self._container = None
        self._canvas_host = None
        self._image = None
        self._banner = None
        self._banner_label = None
        controller.set_on_state_change(self._on_state_change)

    def setup(self):
        """Create the canvas, controls and timers. Call inside a page context."""
        with ui.element('div').classes('relative w-full overflow-hidden rounded-2xl border-[3px] border-black') \
                .style(f'height: {self.height}px; background: #fafafa;') as container:
            self._container = container
            self._canvas_host = ui.element('div').classes('absolute inset-0')
            self._build_canvas()
            self._build_controls()
            self._build_focus_banner()
            self._build_instructions()

        ui.timer(_FRAME_SECONDS, self._frame)
        ui.timer(_MEASURE_SECONDS, self._measure)
        return self

    # --- Construction ---

    def _build_canvas(self):
        viewport = self.controller.state.viewport
        self._canvas_host.clear()
        with self._canvas_host:
            self._image = ui.interactive_image(
                size=(int(viewport.width), int(viewport.height)),
                events=['mousedown', 'mousemove', 'mouseup', 'mouseout'],
                on_mouse=self._handle_mouse,
                cross=False,
            ).classes('w-full h-full').style('cursor: grab;')
            self._image.on('wheel', self._handle_wheel,
                           js_handler='(e) => { e.preventDefault(); emit(e.deltaY); }')
            self._image.on('touchmove', self._handle_touch_move, js_handler=TOUCH_JS_HANDLER)
            self._image.on('touchend', lambda _: self.controller.touch_end())
            self._image.on('touchcancel', lambda _: self.controller.touch_end())
        self._dirty = True

    def _build_controls(self):
        with ui.column().classes('absolute top-5 right-5 gap-2 z-10'):
            ui.button('+', on_click=self.controller.zoom_in).props('flat dense').classes(_BUTTON_CLASSES)
            ui.button('−', on_click=self.controller.zoom_out).props('flat dense').classes(_BUTTON_CLASSES)
            ui.button(icon='restart_alt', on_click=self.controller.reset_view).props('flat dense') \
                .classes(_BUTTON_CLASSES).tooltip('Reset view')

    def _build_focus_banner(self):
        with ui.row().classes('absolute top-5 left-5 items-center gap-3 z-10 bg-black text-white '
                              'rounded-lg px-6 py-3 font-bold lowercase') as banner:
            self._banner_label = ui.label('')
            ui.button('clear', on_click=self.controller.clear_focus).props('flat dense no-caps') \
                .classes('bg-white text-black rounded px-3')
        self._banner = banner
        self._banner.set_visibility(False)

    def _build_instructions(self):
        with ui.row().classes('absolute bottom-5 left-5 gap-4 z-10 bg-white border-2 border-black rounded-lg '
                              'px-5 py-3 text-[11px] font-semibold uppercase tracking-wider text-black') \
                .style('pointer-events: none;'):
            ui.label('drag to pan')
            ui.label('scroll to zoom')
            ui.label('click nodes')

    # --- Events ---

    def _handle_mouse(self, e):
        point = normalize_pointer_payload(e)
        event_type = getattr(e, 'type', None)
        if event_type == 'mouseout':
            self.controller.pointer_leave()
            return
        if point is None:
            return
        x, y = point
        if event_type == 'mousedown':
            self.controller.pointer_down(x, y)
        elif event_type == 'mousemove':
            self.controller.pointer_move(x, y)
        elif event_type == 'mouseup':
            self.controller.pointer_up(x, y)

    def _handle_wheel(self, e):
        self.controller.wheel(normalize_wheel_payload(e))

    def _handle_touch_move(self, e):
        self.controller.touch_move(normalize_touch_payload(e))

    async def _measure(self):
        if self._container is None:
            return
        try:
            size = await ui.run_javascript(
                f'const r = getHtmlElement({self._container.id}).getBoundingClientRect(); '
                f'return [r.width, r.height];'
            )
        except TimeoutError:
            return
        if not size or len(size) < 2:
            return
        before = self.controller.state.viewport
        self.controller.resize(size[0], size[1])
        if self.controller.state.viewport != before:
            logger.info(f"Mindmap viewport resized to {size[0]}x{size[1]}")
            self._build_canvas()

    def _on_state_change(self, state: MindmapState):
        self.animator.retarget(self.controller.snapshot())
        self._dirty = True

    # --- Drawing ---

    def _frame(self):
        now = time.monotonic()
        dt, self._last_frame = now - self._last_frame, now
        if not self._dirty and self.animator.settled:
            return
        display = self.animator.step(dt)
        self._image.content = scene_to_svg_content(build_scene(display))
        self._dirty = False

        banner = render_focus_banner(self.controller.snapshot())
        self._banner.set_visibility(banner is not None)
        if banner:
            self._banner_label.text = f"focused: {banner['label']}"

        state = self.controller.state
        cursor = 'grabbing' if state.dragging_canvas or state.dragging_node_id else 'grab'
        self._image.style(f'cursor: {cursor};')


class OrbitalView:
    """Rotating member ring around a fixed upload action."""

    def __init__(self, controller: OrbitalController, width: int = 640, height: int = 600):
        self.controller = controller
        self.width = width
        self.height = height
        self._image = None

    def setup(self):
        self.controller.resize(self.width)
        self._image = ui.interactive_image(
            size=(self.width, self.height),
            events=['click', 'mousemove', 'mouseout'],
            on_mouse=self._handle_mouse,
            cross=False,
        ).classes('w-full')
        self._redraw()
        ui.timer(ORBIT_TICK_SECONDS, self._tick)
        return self

    def _local(self, e):
        point = normalize_pointer_payload(e)
        if point is None:
            return None
        return point[0] - self.width / 2, point[1] - self.height / 2

    def _handle_mouse(self, e):
        event_type = getattr(e, 'type', None)
        if event_type == 'mouseout':
            self.controller.hover(None)
            return
        local = self._local(e)
        if local is None:
            return
        target = hit_test(self.controller, *local)
        if event_type == 'mousemove':
            self.controller.hover(target)
        elif event_type == 'click':
            if target == 'center':
                self.controller.click_center()
            elif target is not None:
                self.controller.select(target)
            self._redraw()

    def _tick(self):
        if self.controller.paused:
            return
        self.controller.tick()
        self._redraw()

    def _redraw(self):
        self._image.content = orbital_svg_content(self.controller, self.width, self.height)


def user_detail_dialog(controller: MindmapController, user_id: str,
                       on_close: Optional[Callable[[], None]] = None):
    """Card listing a learner's name, bio and topics."""
    member = None
    for cluster in controller.clusters:
        for candidate in cluster.users:
            if candidate.user_id == user_id:
                member = candidate
                break
        if member:
            break
    if member is None:
        logger.warning(f"User '{user_id}' not found in clusters")
        return None

    with ui.dialog() as dialog, ui.card().classes('w-96 border-2 border-black'):
        ui.label(member.user_name).classes('text-xl font-bold')
        if member.user_bio:
            ui.label(member.user_bio).classes('text-sm text-gray-600')
        if member.modules:
            ui.label(f"Learning {len(member.modules)} topic{'s' if len(member.modules) != 1 else ''}") \
                .classes('text-xs uppercase tracking-wider text-gray-500 mt-2')
            with ui.row().classes('gap-1 flex-wrap'):
                for module in member.modules:
                    ui.badge(module, color='black')

        def close():
            dialog.close()
            if on_close:
                on_close()

        ui.button('close', on_click=close).props('flat no-caps').classes('self-end')
    dialog.open()
    return dialog
