from datetime import datetime, timedelta, timezone

from disksleuth.analysis import find_stale_files, top_files
from disksleuth.tree import FileNode, FileTree


def _build(entries):
    """entries: list of (name, size, modified) files under C:\\data."""
    tree = FileTree()
    root = tree.add_root("C:")
    data = tree.add_node(FileNode.new_dir("data", root))
    tree.add_child(root, data)
    indices = {}
    for name, size, modified in entries:
        node = FileNode.new_file(name, size, data)
        node.modified = modified
        idx = tree.add_node(node)
        tree.add_child(data, idx)
        indices[name] = idx
    tree.aggregate_sizes()
    return tree, indices


def test_top_files_order_and_paths():
    tree, idx = _build([("a.bin", 5, None), ("b.bin", 50, None), ("c.bin", 20, None)])
    result = top_files(tree, 10)
    assert [f.size for f in result] == [50, 20, 5]
    assert result[0].index == idx["b.bin"]
    assert result[0].path == "C:\\data\\b.bin"


def test_top_files_truncates():
    tree, _ = _build([(f"f{i}", i, None) for i in range(1, 8)])
    result = top_files(tree, 3)
    assert len(result) == 3
    assert [f.size for f in result] == [7, 6, 5]


def test_top_files_empty_tree():
    assert top_files(FileTree(), 5) == []


def test_find_stale_files_filters_by_age():
    now = datetime.now()
    tree, idx = _build(
        [
            ("old.iso", 100, now - timedelta(days=400)),
            ("recent.txt", 999, now - timedelta(days=1)),
            ("unknown.dat", 500, None),
            ("future.log", 700, now + timedelta(days=3)),
        ]
    )
    stale = find_stale_files(tree, 365, 10)
    assert [f.index for f in stale] == [idx["old.iso"]]
    assert stale[0].age_days == 400
    assert stale[0].path == "C:\\data\\old.iso"
    assert stale[0].size == 100


def test_find_stale_files_sorted_and_limited():
    old = datetime.now() - timedelta(days=30)
    tree, _ = _build([(f"f{i}", size, old) for i, size in enumerate([3, 9, 1, 7])])
    stale = find_stale_files(tree, 10, 2)
    assert [f.size for f in stale] == [9, 7]


def test_find_stale_files_accepts_aware_timestamps():
    modified = datetime.now(timezone.utc) - timedelta(days=10)
    tree, idx = _build([("aware.txt", 4, modified)])
    stale = find_stale_files(tree, 5, 10)
    assert [f.index for f in stale] == [idx["aware.txt"]]
    assert stale[0].last_modified == modified


def test_zero_age_threshold_includes_past_files():
    past = datetime.now() - timedelta(seconds=5)
    tree, _ = _build([("x", 1, past), ("y", 2, past)])
    assert len(find_stale_files(tree, 0, 10)) == 2