import os
import threading
from datetime import datetime

import pytest

from disksleuth.live import LiveTree
from disksleuth.parallel import root_display_name, scan_parallel
from disksleuth.progress import ScanCancelled, ScanComplete, ScanError


def _scan(path, cancel=None):
    messages = []
    live = LiveTree()
    scan_parallel(path, messages.append, cancel or threading.Event(), live)
    return live.snapshot(), messages


def _make_tree(root):
    (root / "a.txt").write_bytes(b"x" * 100)
    (root / "sub").mkdir()
    (root / "sub" / "b.bin").write_bytes(b"y" * 200)
    (root / "sub" / "deeper").mkdir()
    (root / "sub" / "deeper" / "c.dat").write_bytes(b"z" * 50)


def _index_of(tree, name):
    return next(i for i, n in enumerate(tree.nodes) if n.name == name)


def test_root_display_name_drive():
    assert root_display_name("C:\\") == "C:"
    assert root_display_name("d:") == "d:"


def test_root_display_name_folder(tmp_path):
    assert root_display_name(tmp_path / "data") == "data"
    assert root_display_name(str(tmp_path / "data") + os.sep) == "data"


def test_scan_builds_aggregated_tree(tmp_path):
    _make_tree(tmp_path)
    tree, messages = _scan(tmp_path)

    assert len(tree.roots) == 1
    root = tree.node(tree.roots[0])
    assert root.name == tmp_path.name
    assert tree.total_size == 100 + 200 + 50
    assert root.descendant_count == 3

    sub = _index_of(tree, "sub")
    assert tree.node(sub).size == 250
    assert tree.children_sorted_by_size(tree.roots[0])[0] == sub

    c = _index_of(tree, "c.dat")
    assert tree.full_path(c) == f"{tmp_path.name}\\sub\\deeper\\c.dat"

    assert not any(isinstance(m, ScanError) for m in messages)
    assert isinstance(messages[-1], ScanComplete)
    assert messages[-1].error_count == 0
    assert messages[-1].duration >= 0


def test_file_modified_time_recorded(tmp_path):
    (tmp_path / "f.txt").write_bytes(b"hello")
    tree, _ = _scan(tmp_path)
    node = tree.node(_index_of(tree, "f.txt"))
    expected = datetime.fromtimestamp(os.lstat(tmp_path / "f.txt").st_mtime)
    assert node.modified == expected
    assert node.size == 5


def test_missing_root_reports_error(tmp_path):
    missing = tmp_path / "missing"
    tree, messages = _scan(missing)
    errors = [m for m in messages if isinstance(m, ScanError)]
    assert [e.path for e in errors] == [str(missing)]
    assert messages[-1] == ScanComplete(duration=messages[-1].duration, error_count=1)
    assert len(tree) == 1


def test_unreadable_directory_gets_error_node(tmp_path, monkeypatch):
    (tmp_path / "locked").mkdir()
    (tmp_path / "locked" / "hidden.txt").write_bytes(b"abc")
    (tmp_path / "ok.txt").write_bytes(b"abcd")
    locked = str(tmp_path / "locked")
    real_scandir = os.scandir

    def fake_scandir(path="."):
        if os.fspath(path) == locked:
            raise PermissionError(13, "Permission denied", locked)
        return real_scandir(path)

    monkeypatch.setattr(os, "scandir", fake_scandir)
    tree, messages = _scan(tmp_path)
    monkeypatch.undo()

    error_nodes = [n for n in tree.nodes if n.is_error]
    assert [n.name for n in error_nodes] == ["locked"]
    assert error_nodes[0].is_dir
    assert error_nodes[0].parent == tree.roots[0]
    assert all(n.name != "hidden.txt" for n in tree.nodes)
    assert [m.path for m in messages if isinstance(m, ScanError)] == [locked]
    assert messages[-1].error_count == 1
    assert tree.total_size == 4


def test_unreadable_file_gets_error_node(tmp_path, monkeypatch):
    (tmp_path / "bad.bin").write_bytes(b"q" * 30)
    (tmp_path / "good.bin").write_bytes(b"q" * 7)
    bad = str(tmp_path / "bad.bin")
    real_lstat = os.lstat

    def fake_lstat(path, *args, **kwargs):
        if os.fspath(path) == bad:
            raise PermissionError(13, "Permission denied", bad)
        return real_lstat(path, *args, **kwargs)

    monkeypatch.setattr(os, "lstat", fake_lstat)
    tree, messages = _scan(tmp_path)
    monkeypatch.undo()

    node = tree.node(_index_of(tree, "bad.bin"))
    assert node.is_error
    assert not node.is_dir
    assert node.size == 0
    assert tree.total_size == 7
    assert messages[-1].error_count == 1


@pytest.mark.parametrize("count", [1000])
def test_cancel_stops_scan(tmp_path, count):
    for i in range(count):
        (tmp_path / f"f{i:04d}").write_bytes(b"")
    cancel = threading.Event()
    cancel.set()
    _, messages = _scan(tmp_path, cancel)
    assert messages[-1] == ScanCancelled()
    assert not any(isinstance(m, ScanComplete) for m in messages)