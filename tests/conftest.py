import pytest

from mindmap.clusters import build_clusters
from mindmap.models import Viewport


@pytest.fixture
def scenario_records():
    """u2 learns both topics; u1 and u3 learn one each."""
    return [
        {'userId': 'u1', 'userName': 'Ada', 'userBio': 'Engines', 'moduleTitle': 'AI'},
        {'userId': 'u2', 'userName': 'Grace', 'userBio': None, 'moduleTitle': 'AI'},
        {'userId': 'u2', 'userName': 'Grace', 'userBio': None, 'moduleTitle': 'Design'},
        {'userId': 'u3', 'userName': 'Hedy', 'userBio': 'Radios', 'moduleTitle': 'Design'},
    ]


@pytest.fixture
def scenario_clusters(scenario_records):
    return build_clusters(scenario_records)


@pytest.fixture
def viewport():
    return Viewport(1200, 800)
