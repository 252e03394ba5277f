import pytest

from disksleuth.tree import FileNode, FileTree


def _simple_tree():
    tree = FileTree()
    root = tree.add_root("C:")
    d = tree.add_node(FileNode.new_dir("Users", root))
    tree.add_child(root, d)
    a = tree.add_node(FileNode.new_file("a.txt", 100, d))
    tree.add_child(d, a)
    b = tree.add_node(FileNode.new_file("b.txt", 200, d))
    tree.add_child(d, b)
    return tree, root, d, a, b


def test_tree_aggregation():
    tree, root, d, _, _ = _simple_tree()
    tree.aggregate_sizes()
    assert tree.node(d).size == 300
    assert tree.node(root).size == 300
    assert tree.node(d).descendant_count == 2
    assert tree.node(root).descendant_count == 2
    assert tree.total_size == 300


def test_full_path():
    tree = FileTree()
    root = tree.add_root("C:")
    d = tree.add_node(FileNode.new_dir("Users", root))
    tree.add_child(root, d)
    f = tree.add_node(FileNode.new_file("test.txt", 50, d))
    tree.add_child(d, f)
    assert tree.full_path(f) == "C:\\Users\\test.txt"


def test_children_sorted():
    tree = FileTree()
    root = tree.add_root("C:")
    small = tree.add_node(FileNode.new_file("small.txt", 10, root))
    tree.add_child(root, small)
    big = tree.add_node(FileNode.new_file("big.bin", 1000, root))
    tree.add_child(root, big)
    d = tree.add_node(FileNode.new_dir("folder", root))
    tree.add_child(root, d)
    assert tree.children_sorted_by_size(root) == [d, big, small]


def test_children_are_prepended():
    tree, _, d, a, b = _simple_tree()
    assert tree.children(d) == [b, a]


def test_aggregation_is_repeatable():
    tree, root, d, _, _ = _simple_tree()
    tree.aggregate_sizes()
    tree.aggregate_sizes()
    assert tree.node(root).size == 300
    assert tree.node(d).allocated_size == 300
    assert tree.node(root).descendant_count == 2


def test_percent_of_parent():
    tree, root, d, a, b = _simple_tree()
    tree.aggregate_sizes()
    assert tree.node(a).percent_of_parent == pytest.approx(100 / 3)
    assert tree.node(b).percent_of_parent == pytest.approx(200 / 3)
    assert tree.node(d).percent_of_parent == pytest.approx(100.0)
    assert tree.node(root).percent_of_parent == pytest.approx(100.0)


def test_empty_root_has_zero_percent():
    tree = FileTree()
    root = tree.add_root("D:")
    tree.aggregate_sizes()
    assert tree.node(root).percent_of_parent == 0.0
    assert tree.total_size == 0


def test_largest_files_sorted_descending():
    tree, _, _, a, b = _simple_tree()
    tree.aggregate_sizes()
    assert tree.largest_files == [b, a]


def test_largest_files_limited_to_100():
    tree = FileTree()
    root = tree.add_root("C:")
    for i in range(150):
        f = tree.add_node(FileNode.new_file(f"f{i}", i, root))
        tree.add_child(root, f)
    tree.aggregate_sizes()
    assert len(tree.largest_files) == 100
    sizes = [tree.node(i).size for i in tree.largest_files]
    assert sizes[0] == 149
    assert sizes == sorted(sizes, reverse=True)


def test_multiple_roots_total():
    tree = FileTree()
    r1 = tree.add_root("C:")
    r2 = tree.add_root("D:")
    f1 = tree.add_node(FileNode.new_file("x", 10, r1))
    tree.add_child(r1, f1)
    f2 = tree.add_node(FileNode.new_file("y", 32, r2))
    tree.add_child(r2, f2)
    tree.aggregate_sizes()
    assert tree.total_size == 42
    assert tree.roots == [r1, r2]


def test_node_constructors():
    f = FileNode.new_file("a", 7, None)
    assert (f.size, f.allocated_size, f.is_dir, f.is_error) == (7, 7, False, False)
    d = FileNode.new_dir("d", 3)
    assert (d.size, d.is_dir, d.parent) == (0, True, 3)
    e = FileNode.new_error("denied", True, 1)
    assert (e.is_error, e.is_dir, e.size) == (True, True, 0)


def test_error_node_counts_as_file_when_not_dir():
    tree = FileTree()
    root = tree.add_root("C:")
    e = tree.add_node(FileNode.new_error("locked.sys", False, root))
    tree.add_child(root, e)
    tree.aggregate_sizes()
    assert tree.node(root).descendant_count == 1
    assert tree.node(root).size == 0


def test_len_and_invalid_index():
    tree = FileTree()
    assert len(tree) == 0
    tree.add_root("C:")
    assert len(tree) == 1
    with pytest.raises(IndexError):
        tree.node(5)
    with pytest.raises(IndexError):
        tree.node(-1)
    with pytest.raises(IndexError):
        tree.add_child(0, 9)