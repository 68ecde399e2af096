"""
Main NiceGUI application for the learning network.

Loads learning records, aggregates them into topic clusters and renders
the interactive mindmap with a topic filter. A second tab shows the
orbital member view.
"""

import logging
import sys

from dotenv import load_dotenv
from nicegui import ui

from mindmap.clusters import ClusterDataError, build_clusters, load_learning_records, topics
from mindmap.config import get_settings
from mindmap.controller import MindmapController
from mindmap.orbital import OrbitalController
from mindmap.paths import ensure_db_dir
from mindmap.view import MindmapView, OrbitalView, user_detail_dialog

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

ensure_db_dir()
settings = get_settings()

ALL_TOPICS = 'all topics'


def load_clusters():
    try:
        return build_clusters(load_learning_records(settings.data_file))
    except ClusterDataError as e:
        logger.error(f"Failed to load learning network: {e}")
        ui.notify('Could not read learning data', type='negative')
        return []


def orbital_members(clusters):
    """One orbital member per distinct learner, in cluster order."""
    seen = {}
    for cluster in clusters:
        for member in cluster.users:
            if member.user_id in seen:
                continue
            first, _, last = member.user_name.partition(' ')
            seen[member.user_id] = {'id': member.user_id, 'firstName': first, 'lastName': last}
    return list(seen.values())


@ui.page('/')
def main_page():
    ui.query('body').style('margin: 0; background: #000;')

    clusters = load_clusters()
    controller = MindmapController(clusters, radii=settings.radii)
    controller.set_on_user_click(lambda user_id: user_detail_dialog(controller, user_id))

    with ui.column().classes('w-full max-w-6xl mx-auto p-6 gap-6'):
        ui.label(settings.title).classes('text-xs uppercase tracking-widest text-gray-500 font-bold')
        ui.label('who is learning what').classes('text-5xl font-black lowercase text-white')

        if not clusters:
            ui.label('No learners yet. Start a module to appear in the network.').classes('text-gray-400')

        with ui.tabs().classes('text-white') as tabs:
            mindmap_tab = ui.tab('mindmap')
            orbital_tab = ui.tab('orbit')

        with ui.tab_panels(tabs, value=mindmap_tab).classes('w-full bg-transparent'):
            with ui.tab_panel(mindmap_tab):
                def on_topic(e):
                    controller.set_selected_topic(None if e.value == ALL_TOPICS else e.value)

                ui.select([ALL_TOPICS] + topics(clusters), value=ALL_TOPICS, on_change=on_topic) \
                    .props('dense outlined dark').classes('w-64')
                MindmapView(controller).setup()

            with ui.tab_panel(orbital_tab):
                orbital = OrbitalController(
                    orbital_members(clusters),
                    on_upload_click=lambda: ui.notify('Upload your work from a module page', type='info'),
                )
                OrbitalView(orbital).setup()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title=settings.title,
        port=settings.port,
        reload=not getattr(sys, 'frozen', False),
    )
