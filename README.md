# disksleuth

The scanning and analysis engine for a disk space analyser. It walks a
drive or folder, builds a compact tree of files and directories, adds up
sizes from the bottom of the tree to the top, and answers questions such as
"which files are largest?", "what kinds of files take up the space?" and
"what hasn't been touched in a long time?".

## Installation

```
pip install disksleuth
```

Running the tests needs the `test` extra:

```
pip install "disksleuth[test]"
pytest
```

## Scanning

`disksleuth.scanner.start_scan(root_path)` walks `root_path` on a
background thread and returns a `ScanHandle`:

- `handle.progress_queue` is a `queue.Queue` that receives the progress
  messages from `disksleuth.progress`: `ScanTier`, `ScanUpdate`,
  `ScanError`, `ScanComplete` (with `duration` in seconds and
  `error_count`) and `ScanCancelled`.
- `handle.live_tree` is a `LiveTree` that fills up while the scan runs.
- `handle.cancel()` asks the scan to stop; `handle.is_cancelled()` tells
  whether that was asked; `handle.join(timeout)` waits for the thread and
  returns `True` once it has finished.

```python
from disksleuth.scanner import start_scan
from disksleuth.size import format_size

handle = start_scan("/home/me")
handle.join(None)

tree = handle.live_tree.snapshot()
print(format_size(tree.total_size))
```

The walk itself is `disksleuth.parallel.scan_parallel(root_path, progress,
cancel, live_tree)`, where `progress` is any callable that takes a progress
message and `cancel` is a `threading.Event`. It does not follow symbolic
links. Entries that cannot be read are kept in the tree as error nodes
(`is_error=True`) and reported as `ScanError`. Cancellation is checked
every 1000 entries, and every 5000 entries the live tree is aggregated and
a `ScanUpdate` is sent. `root_display_name(path)` gives the root's name in
the tree: `C:` for a drive root, otherwise the folder's name.

### The shared tree

`disksleuth.live.LiveTree` guards a `FileTree` with a lock:

```python
with live_tree.read() as tree:
    print(len(tree))
```

`write()` is the matching context manager for changes, `replace(tree)`
swaps in a finished tree, `snapshot()` returns an independent deep copy,
and `len(live_tree)` is the node count.

### Building a tree from NTFS MFT records

`disksleuth.mft` turns NTFS Master File Table enumeration output into a
tree:

- `parse_usn_records(data)` decodes one raw enumeration buffer (an 8-byte
  header followed by `USN_RECORD_V2` entries) into `MftEntry` records, with
  references masked to 48 bits.
- `build_tree_from_mft(records, root_display, root_path, progress, cancel)`
  builds and aggregates a tree, leaving out reserved records (reference 23
  and below) and names starting with `$`, and attaching records with an
  unknown parent to the root. File sizes and modification times are read
  from the filesystem; it returns the tree and the number of files that
  could not be read.
- `scan_mft(root_path, buffers, progress, cancel, live_tree)` does the
  whole job from an iterable of raw buffers and puts the finished tree in
  `live_tree`.
- `is_mft_available(path)` checks for a drive-letter path, administrator
  rights, an NTFS volume and a raw volume that can be opened.

## The file tree

`disksleuth.tree.FileTree` stores every `FileNode` in one flat list. Nodes
refer to their parent, first child and next sibling by index.

```python
from disksleuth.tree import FileNode, FileTree

tree = FileTree()
root = tree.add_root("C:")
users = tree.add_node(FileNode.new_dir("Users", root))
tree.add_child(root, users)
doc = tree.add_node(FileNode.new_file("a.txt", 100, users))
tree.add_child(users, doc)

tree.aggregate_sizes()
tree.node(root).size      # 100
tree.full_path(doc)       # 'C:\\Users\\a.txt'
```

`aggregate_sizes()` fills in directory sizes, descendant file counts,
each node's percentage of its parent, the total size and the list of the
100 largest files. It is safe to call repeatedly during a live scan.
`children(index)` lists a node's children, most recently added first;
`children_sorted_by_size(index)` puts directories first, then sorts by
size, largest first. `FileNode.new_error(name, is_dir, parent)` makes a
placeholder for an unreadable entry.

## Analysis

- `disksleuth.analysis.top_files(tree, n)`: the `n` largest files with
  their full paths, as `LargestFile` records.
- `disksleuth.analysis.find_stale_files(tree, min_age_days, max_results)`:
  files not modified for at least `min_age_days` days, largest first, as
  `StaleFile` records. Files without a modification time are skipped.
- `disksleuth.file_types.analyse_file_types(tree)`: a `CategoryStats` per
  `FileCategory` (Documents, Images, Video, Audio, Archives, Code,
  Executables, System, Other), largest category first.
- `disksleuth.file_types.categorise_extension(ext)`: the category of a
  single extension, case-insensitive.

## Drives and privileges

`disksleuth.drives.enumerate_drives()` lists mounted local drives as
`DriveInfo` records with their path, type (`DriveType`), filesystem and
total, free and used space, plus formatted versions of those sizes.
Network drives are left out; the `label` field is left empty. A drive
whose usage cannot be read is reported with zero capacity.
`DriveInfo.from_usage(...)` builds a record from a total and a free size.

`disksleuth.permissions.is_elevated()` returns `True` when running as
root, or, on Windows, when the system drive's raw volume can be opened.

## Formatting

```python
from disksleuth.size import format_count, format_size

format_size(1536)          # '1.5 KB'
format_size(1073741824)    # '1.00 GB'
format_count(1234567)      # '1,234,567'
```

Both raise `ValueError` for negative numbers.

## Application icon

The package draws its own icon: a pie chart inside a magnifying glass.
The `disksleuth-icon` command writes it as a multi-resolution `.ico` file:

```
disksleuth-icon
disksleuth-icon out/app.ico --sizes 64 32 16 --force
```

It writes `assets/icon.ico` at sizes 48, 32 and 16 by default and leaves an
existing file alone unless `--force` is given.

From Python, `disksleuth.icon.render_icon(size)` gives top-to-bottom RGBA
pixels, `rgba_to_ico_bmp(rgba, size)` turns them into an ICO image entry,
`generate_ico(sizes)` gives the bytes of a whole ICO file and
`write_icon(path, sizes)` writes one.

## What this package does not do

- It has no graphical interface: no treemap, tree view or charts. It
  provides the data a front end would display.
- It has no command for running a scan; scans are started from Python.
- It does not read the Master File Table from a volume by itself.
  `scan_mft` works on enumeration buffers that the caller supplies, and
  `start_scan` always uses the directory walk.
- It does not look for duplicate files.