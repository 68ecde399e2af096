import math
from itertools import combinations

import pytest

from mindmap.layout import (
    calculate_initial_zoom,
    calculate_topic_positions,
    calculate_user_positions,
    filter_clusters,
    generate_layout,
    user_node_size,
)
from mindmap.models import Cluster, ClusterMember, LayoutRadii, NodeType, TopicData, UserData, Viewport


def nodes_of_type(layout, node_type):
    return [n for n in layout.nodes if n.type is node_type]


def connection_pairs(layout):
    return {frozenset((c.from_id, c.to_id)): c.strength for c in layout.connections}


def test_empty_clusters_yield_only_center(viewport):
    layout = generate_layout([], viewport, LayoutRadii())
    assert len(layout.nodes) == 1
    center = layout.nodes[0]
    assert center.type is NodeType.CENTER
    assert (center.x, center.y) == (600, 400)
    assert layout.connections == []


def test_scenario_a_one_node_per_membership(scenario_clusters, viewport):
    layout = generate_layout(scenario_clusters, viewport)

    assert len(nodes_of_type(layout, NodeType.CENTER)) == 1
    assert len(nodes_of_type(layout, NodeType.TOPIC)) == 2
    users = nodes_of_type(layout, NodeType.USER)
    assert sorted(n.id for n in users) == [
        'user-AI-u1', 'user-AI-u2', 'user-Design-u2', 'user-Design-u3',
    ]

    pairs = connection_pairs(layout)
    # Same learner under both topics: identity edge with strength 2
    assert pairs[frozenset(('user-AI-u2', 'user-Design-u2'))] == 2
    assert pairs[frozenset(('user-AI-u1', 'user-AI-u2'))] == 1
    assert pairs[frozenset(('user-Design-u2', 'user-Design-u3'))] == 1
    assert frozenset(('user-AI-u1', 'user-Design-u3')) not in pairs
    assert len(layout.connections) == 9


def test_topic_ring_spacing(viewport):
    clusters = [Cluster(topic=f"T{i}") for i in range(4)]
    layout = generate_layout(clusters, viewport, LayoutRadii(center_radius=200))
    topics = nodes_of_type(layout, NodeType.TOPIC)
    expected = [(800, 400), (600, 600), (400, 400), (600, 200)]
    for node, (ex, ey) in zip(topics, expected):
        assert node.x == pytest.approx(ex)
        assert node.y == pytest.approx(ey)
        assert math.hypot(node.x - 600, node.y - 400) == pytest.approx(200)


def test_member_ring_around_topic(scenario_clusters, viewport):
    layout = generate_layout(scenario_clusters, viewport, LayoutRadii(center_radius=250, user_radius=80))
    topic = layout.node('topic-0')
    assert (topic.x, topic.y) == (pytest.approx(850), pytest.approx(400))
    u1 = layout.node('user-AI-u1')
    u2 = layout.node('user-AI-u2')
    assert (u1.x, u1.y) == (pytest.approx(930), pytest.approx(400))
    assert (u2.x, u2.y) == (pytest.approx(770), pytest.approx(400))

    # Second cluster's ring is rotated by 0.3 rad
    topic1 = layout.node('topic-1')
    first = layout.node('user-Design-u2')
    angle = math.atan2(first.y - topic1.y, first.x - topic1.x)
    assert angle == pytest.approx(0.3)


def test_every_topic_has_exactly_one_center_connection(scenario_clusters, viewport):
    layout = generate_layout(scenario_clusters, viewport)
    for topic in nodes_of_type(layout, NodeType.TOPIC):
        center_edges = [c for c in layout.connections
                        if {c.from_id, c.to_id} == {'center', topic.id}]
        assert len(center_edges) == 1
        assert center_edges[0].strength == 1


def test_every_user_connects_to_a_topic(scenario_clusters, viewport):
    layout = generate_layout(scenario_clusters, viewport)
    topic_ids = {n.id for n in nodes_of_type(layout, NodeType.TOPIC)}
    for user in nodes_of_type(layout, NodeType.USER):
        assert any(c.touches(user.id) and c.other(user.id) in topic_ids for c in layout.connections)


def test_strength_above_one_only_on_user_edges(viewport):
    clusters = [
        Cluster('A', [ClusterMember('x'), ClusterMember('y')]),
        Cluster('B', [ClusterMember('x'), ClusterMember('y')]),
        Cluster('C', [ClusterMember('x')]),
    ]
    layout = generate_layout(clusters, viewport)
    types = {n.id: n.type for n in layout.nodes}
    for conn in layout.connections:
        if conn.strength > 1:
            assert types[conn.from_id] is NodeType.USER
            assert types[conn.to_id] is NodeType.USER


def test_shared_topic_strength_matches_shared_count(viewport):
    clusters = [
        Cluster('A', [ClusterMember('x'), ClusterMember('y'), ClusterMember('z')]),
        Cluster('B', [ClusterMember('x'), ClusterMember('y')]),
        Cluster('C', [ClusterMember('z'), ClusterMember('w')]),
    ]
    layout = generate_layout(clusters, viewport)
    user_of = {n.id: n.data.user_id for n in layout.nodes if isinstance(n.data, UserData)}
    memberships = {}
    for c in clusters:
        for m in c.users:
            memberships.setdefault(m.user_id, set()).add(c.topic)

    for u1, u2 in combinations(sorted(memberships), 2):
        shared = len(memberships[u1] & memberships[u2])
        edges = [c for c in layout.connections
                 if c.from_id in user_of and c.to_id in user_of
                 and {user_of[c.from_id], user_of[c.to_id]} == {u1, u2}]
        if shared:
            assert edges, f"missing edge between {u1} and {u2}"
            assert all(e.strength == shared for e in edges)
        else:
            assert edges == []


def test_layout_is_deterministic(scenario_clusters, viewport):
    radii = LayoutRadii(center_radius=300, user_radius=90)
    a = generate_layout(scenario_clusters, viewport, radii)
    b = generate_layout(scenario_clusters, viewport, radii)
    assert [(n.id, n.x, n.y) for n in a.nodes] == [(n.id, n.x, n.y) for n in b.nodes]
    assert a.connections == b.connections


def test_accepts_wire_dicts(viewport):
    clusters = [{'topic': 'AI', 'users': [{'userId': 'u1'}, {'userId': 'u2'}]}]
    layout = generate_layout(clusters, viewport)
    assert len(layout.nodes) == 4
    topic = layout.node('topic-0')
    assert topic.data == TopicData(user_count=2)
    assert layout.node('user-AI-u1').label == 'u1'


def test_duplicate_member_in_one_cluster_is_collapsed(viewport):
    clusters = [Cluster('AI', [ClusterMember('u1', 'Ada'), ClusterMember('u1', 'Ada again')])]
    layout = generate_layout(clusters, viewport)
    assert [n.id for n in layout.nodes if n.type is NodeType.USER] == ['user-AI-u1']
    assert layout.node('topic-0').data.user_count == 1


def test_user_size_grows_with_modules():
    assert user_node_size(['a']) == 40
    assert user_node_size(['a', 'b']) == 44
    assert user_node_size([str(i) for i in range(20)]) == 56
    assert user_node_size([]) == 40


@pytest.mark.parametrize('count, expected', [(1, 1.0), (9, 1.0), (10, 0.8), (29, 0.8), (30, 0.6), (50, 0.5), (500, 0.5)])
def test_initial_zoom_decreases_with_node_count(count, expected):
    zoom = calculate_initial_zoom(count)
    assert zoom == expected
    assert 0.3 <= zoom <= 3.0


def test_filter_clusters(scenario_clusters):
    assert [c.topic for c in filter_clusters(scenario_clusters, None)] == ['AI', 'Design']
    assert [c.topic for c in filter_clusters(scenario_clusters, 'Design')] == ['Design']
    assert filter_clusters(scenario_clusters, 'Missing') == []


def test_position_helpers_handle_zero():
    assert calculate_topic_positions(0, 0, 0, 100) == []
    assert calculate_user_positions(0, 0, 0, 100) == []
    single = calculate_user_positions(1, 10, 20, 5)
    assert single == [(pytest.approx(15), pytest.approx(20))]


def test_viewport_measured_falls_back_to_defaults():
    assert Viewport.measured(0, None) == Viewport(1200, 800)
    assert Viewport.measured(640, 480) == Viewport(640, 480)


def test_duplicate_topic_names_are_merged(viewport):
    clusters = [Cluster('AI', [ClusterMember('u1')]), Cluster('AI', [ClusterMember('u1'), ClusterMember('u2')])]
    layout = generate_layout(clusters, viewport)
    ids = [n.id for n in layout.nodes]
    assert len(set(ids)) == len(ids)
    assert [n.id for n in nodes_of_type(layout, NodeType.TOPIC)] == ['topic-0']
    assert layout.node('topic-0').data.user_count == 2
    assert all(c.from_id != c.to_id for c in layout.connections)


def test_ambiguous_topic_user_join_gets_distinct_ids(viewport):
    clusters = [Cluster('a-b', [ClusterMember('c')]), Cluster('a', [ClusterMember('b-c')])]
    layout = generate_layout(clusters, viewport)
    users = nodes_of_type(layout, NodeType.USER)
    assert [n.id for n in users] == ['user-a-b-c', 'user-a-b-c#1']
    ids = [n.id for n in layout.nodes]
    assert len(set(ids)) == len(ids)
    # Each topic still links to its own member
    pairs = connection_pairs(layout)
    assert frozenset(('topic-0', 'user-a-b-c')) in pairs
    assert frozenset(('topic-1', 'user-a-b-c#1')) in pairs
