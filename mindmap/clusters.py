"""
Aggregation of learning records into topic clusters.

A learning record says that a user is learning a module:

    {"userId": "u1", "userName": "Ada", "userBio": "...", "moduleTitle": "AI"}

Clusters are grouped by module title in first-seen order. Each user appears
once per topic, and every member's `modules` lists all topics that user is
learning across the whole record set.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from mindmap.models import Cluster, ClusterMember

logger = logging.getLogger(__name__)


class ClusterDataError(ValueError):
    """Learning records could not be read."""


def build_clusters(records: List[Dict[str, Any]]) -> List[Cluster]:
    topic_map: Dict[str, Cluster] = {}
    user_topics: Dict[str, List[str]] = {}

    for record in records:
        user_id = record.get('userId')
        topic = record.get('moduleTitle')
        if not user_id or not topic:
            logger.warning(f"Skipping incomplete learning record: {record!r}")
            continue
        user_id = str(user_id)

        topics = user_topics.setdefault(user_id, [])
        if topic not in topics:
            topics.append(topic)

        cluster = topic_map.setdefault(topic, Cluster(topic=topic))
        if any(u.user_id == user_id for u in cluster.users):
            continue
        cluster.users.append(ClusterMember(
            user_id=user_id,
            user_name=record.get('userName') or user_id,
            user_bio=record.get('userBio'),
        ))

    clusters = list(topic_map.values())
    for cluster in clusters:
        for member in cluster.users:
            member.modules = list(user_topics[member.user_id])
    return clusters


def topics(clusters: List[Cluster]) -> List[str]:
    return [c.topic for c in clusters]


def load_learning_records(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    Read a JSON array of learning records. A missing file is an empty
    network, not an error.
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"No learning data at {path}")
        return []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ClusterDataError(f"Malformed learning data in {path}: {e}") from e

    if not isinstance(data, list):
        raise ClusterDataError(f"Learning data in {path} must be a JSON array")
    return [r for r in data if isinstance(r, dict)]


def save_learning_records(path: Union[str, Path], records: List[Dict[str, Any]]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
