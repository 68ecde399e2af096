import json

import pytest

from mindmap.clusters import (
    ClusterDataError,
    build_clusters,
    load_learning_records,
    save_learning_records,
    topics,
)


def test_groups_by_module_in_first_seen_order(scenario_clusters):
    assert topics(scenario_clusters) == ['AI', 'Design']
    assert [u.user_id for u in scenario_clusters[0].users] == ['u1', 'u2']
    assert [u.user_id for u in scenario_clusters[1].users] == ['u2', 'u3']


def test_members_list_all_their_topics(scenario_clusters):
    grace = scenario_clusters[0].users[1]
    assert grace.user_name == 'Grace'
    assert grace.modules == ['AI', 'Design']
    assert scenario_clusters[0].users[0].modules == ['AI']


def test_repeated_records_collapse():
    records = [
        {'userId': 'u1', 'userName': 'Ada', 'moduleTitle': 'AI'},
        {'userId': 'u1', 'userName': 'Ada', 'moduleTitle': 'AI'},
    ]
    clusters = build_clusters(records)
    assert len(clusters) == 1
    assert len(clusters[0].users) == 1
    assert clusters[0].users[0].modules == ['AI']


def test_incomplete_records_are_skipped(caplog):
    records = [
        {'userId': 'u1', 'moduleTitle': 'AI'},
        {'userName': 'Nobody', 'moduleTitle': 'AI'},
        {'userId': 'u2'},
    ]
    clusters = build_clusters(records)
    assert [u.user_id for u in clusters[0].users] == ['u1']
    # Name falls back to the id
    assert clusters[0].users[0].user_name == 'u1'
    assert 'incomplete' in caplog.text


def test_empty_records():
    assert build_clusters([]) == []


def test_save_and_load(tmp_path, scenario_records):
    path = tmp_path / 'nested' / 'learning.json'
    save_learning_records(path, scenario_records)
    assert load_learning_records(path) == scenario_records


def test_missing_file_is_empty(tmp_path):
    assert load_learning_records(tmp_path / 'none.json') == []


def test_malformed_file_raises(tmp_path):
    path = tmp_path / 'bad.json'
    path.write_text('{not json', encoding='utf-8')
    with pytest.raises(ClusterDataError):
        load_learning_records(path)


def test_non_list_raises(tmp_path):
    path = tmp_path / 'obj.json'
    path.write_text(json.dumps({'userId': 'u1'}), encoding='utf-8')
    with pytest.raises(ClusterDataError):
        load_learning_records(path)


def test_non_dict_entries_dropped(tmp_path):
    path = tmp_path / 'mixed.json'
    path.write_text(json.dumps([{'userId': 'u1', 'moduleTitle': 'AI'}, 'junk', 3]), encoding='utf-8')
    assert load_learning_records(path) == [{'userId': 'u1', 'moduleTitle': 'AI'}]
