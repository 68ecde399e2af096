import pytest

from mindmap.highlight import (
    ConnectionIndex,
    active_node_id,
    is_connection_highlighted,
    related_node_ids,
    visible_connections,
    visible_nodes,
)
from mindmap.layout import generate_layout
from mindmap.models import MindmapConnection, NodeType


@pytest.fixture
def layout(scenario_clusters, viewport):
    return generate_layout(scenario_clusters, viewport)


@pytest.fixture
def index(layout):
    return ConnectionIndex(layout.nodes, layout.connections)


def test_active_node_prefers_hover():
    assert active_node_id('a', 'b') == 'a'
    assert active_node_id(None, 'b') == 'b'
    assert active_node_id(None, None) is None


def test_connection_highlight_matches_either_end():
    conn = MindmapConnection('a', 'b')
    assert is_connection_highlighted(conn, 'a')
    assert is_connection_highlighted(conn, 'b')
    assert not is_connection_highlighted(conn, 'c')
    assert not is_connection_highlighted(conn, None)


def test_related_ids_are_one_hop_both_directions(index):
    assert index.related_node_ids('topic-0') == {'center', 'user-AI-u1', 'user-AI-u2'}
    assert index.related_node_ids('user-AI-u2') == {'topic-0', 'user-AI-u1', 'user-Design-u2'}
    assert index.related_node_ids('missing') == set()
    assert index.related_node_ids(None) == set()


def test_module_level_helpers_agree_with_index(layout, index):
    assert related_node_ids(layout.connections, 'topic-1') == index.related_node_ids('topic-1')
    assert visible_connections(layout.connections, 'topic-1') == index.visible_connections('topic-1')
    assert visible_nodes(layout.nodes, layout.connections, None) == layout.nodes


def test_visible_nodes_with_focus(index):
    ids = {n.id for n in index.visible_nodes('topic-0')}
    assert ids == {'center', 'topic-0', 'user-AI-u1', 'user-AI-u2'}


def test_visible_nodes_always_include_center(index):
    ids = {n.id for n in index.visible_nodes('user-Design-u3')}
    assert 'center' in ids
    assert 'user-Design-u3' in ids
    assert 'topic-0' not in ids


def test_focus_excludes_nodes_more_than_one_hop_away(layout, index):
    focus = 'topic-1'
    visible = {n.id for n in index.visible_nodes(focus)}
    near = index.related_node_ids(focus) | {focus}
    for node in layout.nodes:
        if node.id not in near and node.type is not NodeType.CENTER:
            assert node.id not in visible


def test_visible_connections_with_focus(layout, index):
    conns = index.visible_connections('topic-0')
    assert len(conns) == 3
    assert all(c.touches('topic-0') for c in conns)
    assert index.visible_connections(None) == layout.connections


def test_parallel_connections_are_kept():
    conns = [MindmapConnection('a', 'b', 1), MindmapConnection('b', 'a', 2)]
    index = ConnectionIndex([], conns)
    assert index.connections_touching('a') == conns


def test_shared_topic_pairs_for_user(index):
    pairs = index.shared_topic_pairs('user-AI-u2')
    by_id = {related: shared for _, related, shared in pairs}
    assert by_id == {'user-AI-u1': ['AI'], 'user-Design-u2': ['AI', 'Design']}
    assert index.shared_topic_pairs('topic-0') == []
    assert index.shared_topic_pairs(None) == []
