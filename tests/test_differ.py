"""Tests for folderwatch.core.differ."""

import os

from folderwatch.core.differ import Changeset, diff
from folderwatch.core.snapshot import Snapshot, capture_snapshot

from conftest import ts, write_file


def snap(**files) -> Snapshot:
    return Snapshot({name.replace("_", "."): ts(t) for name, t in files.items()})


def test_identical_snapshots_have_no_changes():
    a = snap(a_txt=100, b_txt=200)

    changes = diff(a, a)

    assert changes == Changeset()
    assert changes.is_empty()


def test_created_file():
    s1 = snap(a_txt=100)
    s2 = snap(a_txt=100, b_txt=200)

    assert diff(s1, s2) == Changeset(created=["b.txt"])


def test_changed_file():
    s1 = snap(a_txt=100, b_txt=200)
    s2 = snap(a_txt=150, b_txt=200)

    assert diff(s1, s2) == Changeset(changed=["a.txt"])


def test_deleted_file():
    s1 = snap(a_txt=100, b_txt=200)
    s2 = snap(a_txt=100)

    assert diff(s1, s2) == Changeset(deleted=["b.txt"])


def test_timestamps_compare_exactly():
    s1 = Snapshot({"a.txt": ts(100.000001)})
    s2 = Snapshot({"a.txt": ts(100.000002)})

    assert diff(s1, s2).changed == ["a.txt"]


def test_lists_partition_the_changed_keys():
    old = snap(keep=1, edit=2, drop=3, drop2=4)
    new = snap(keep=1, edit=5, add=6, add2=7)

    changes = diff(old, new)

    created, changed, deleted = map(set, (changes.created, changes.changed, changes.deleted))
    assert not (created & changed or created & deleted or changed & deleted)
    unchanged = {k for k in old if k in new and old[k] == new[k]}
    assert created | changed | deleted == (set(old) | set(new)) - unchanged
    assert not created & set(old)
    assert not deleted & set(new)


def test_applying_changes_reconstructs_new_key_set():
    old = snap(a=1, b=2, c=3)
    new = snap(b=2, c=9, d=4, e=5)

    changes = diff(old, new)
    keys = (set(old) - set(changes.deleted)) | set(changes.created)

    assert keys == set(new)


def test_order_follows_snapshot_iteration():
    old = Snapshot({"z": ts(1), "y": ts(1), "x": ts(1)})
    new = Snapshot({"c": ts(1), "b": ts(1), "a": ts(1)})

    changes = diff(old, new)

    assert changes.deleted == ["z", "y", "x"]
    assert changes.created == ["c", "b", "a"]


def test_capturing_twice_without_changes_is_empty(make_tree):
    root = make_tree({"a.txt": 100, "sub/b.txt": 200})

    assert diff(capture_snapshot(root), capture_snapshot(root)).is_empty()


def test_scenarios_on_disk(tmp_path):
    write_file(tmp_path, "a.txt", 100)
    s1 = capture_snapshot(tmp_path)

    write_file(tmp_path, "b.txt", 200)
    s2 = capture_snapshot(tmp_path)
    assert diff(s1, s2) == Changeset(created=["b.txt"])

    os.utime(tmp_path / "a.txt", (150, 150))
    s3 = capture_snapshot(tmp_path)
    assert diff(s2, s3) == Changeset(changed=["a.txt"])

    (tmp_path / "b.txt").unlink()
    s4 = capture_snapshot(tmp_path)
    assert diff(s3, s4) == Changeset(deleted=["b.txt"])


def test_changeset_total_and_str():
    changes = Changeset(created=["a", "b"], changed=["c"], deleted=[])

    assert changes.total == 3
    assert str(changes) == "+2 ~1 -0"
