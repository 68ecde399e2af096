"""Write a small demo set of learning records for the network view.

Usage:
  python scripts/seed_learning_data.py [--force]

Writes `db/learning.json` (or MINDMAP_DATA_FILE) unless it already exists.
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from mindmap.clusters import save_learning_records  # noqa: E402
from mindmap.config import get_settings  # noqa: E402

DEMO_LEARNERS = [
    ('u1', 'Ada Lovelace', 'Writes notes on engines.', ['Prompt Engineering', 'AI Fundamentals']),
    ('u2', 'Grace Hopper', 'Compilers and teaching.', ['AI Fundamentals', 'Automation']),
    ('u3', 'Alan Turing', None, ['AI Fundamentals']),
    ('u4', 'Katherine Johnson', 'Trajectories by hand.', ['Automation', 'Content Creation']),
    ('u5', 'Hedy Lamarr', 'Frequency hopping.', ['Content Creation']),
    ('u6', 'Claude Shannon', 'Juggling and information.', ['Prompt Engineering', 'Automation', 'AI Fundamentals']),
]


def demo_records():
    records = []
    for user_id, name, bio, modules in DEMO_LEARNERS:
        for module in modules:
            records.append({'userId': user_id, 'userName': name, 'userBio': bio, 'moduleTitle': module})
    return records


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument('--force', action='store_true', help='overwrite an existing data file')
    args = parser.parse_args()

    out_path = get_settings().data_file
    if out_path.exists() and not args.force:
        print(f"{out_path} already exists, use --force to overwrite")
        return
    records = demo_records()
    save_learning_records(out_path, records)
    print(f"Wrote {len(records)} learning records to {out_path}")


if __name__ == '__main__':
    main()
