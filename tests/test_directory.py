import io

import pytest

from clusterfs.directory import (
    ENTRY_SIZE,
    NO_CLUSTER,
    DirEntry,
    Directory,
    initialize_directory,
    read_directory,
    unpack_entry,
)
from clusterfs.metadata import MetaData, compute_meta_data
from clusterfs.utils import FieldLimitationError, InvalidValue, OperationUnsuccessful


@pytest.fixture
def meta():
    return compute_meta_data(64 * 1024, 1024, 8, 64, 16)


def _file(name, ext, parent, size=0):
    return DirEntry(parent_idx=parent, name=name, ext=ext, size=size, is_file=True, is_valid=True)


def _folder(name, parent):
    return DirEntry(parent_idx=parent, name=name, is_valid=True)


def test_pack_has_fixed_size():
    assert len(DirEntry(name="a", ext="txt").pack()) == ENTRY_SIZE


def test_pack_unpack_round_trip():
    entry = DirEntry(
        idx=7, parent_idx=3, name="notes", ext="txt", size=1234, first_clstr=42,
        access_bit=0o755, deleted=False, is_file=True, is_valid=True,
        creation_epoch=100, access_epoch=200, modify_epoch=300,
    )
    assert unpack_entry(entry.pack()) == entry


def test_flags_share_one_word():
    packed = DirEntry(first_clstr=NO_CLUSTER, is_valid=True).pack()
    word = int.from_bytes(packed[268 + 4:268 + 8], "little")
    assert word & 0xFFFFF == NO_CLUSTER
    assert word >> 31 == 1


def test_pack_rejects_long_extension():
    with pytest.raises(FieldLimitationError):
        DirEntry(name="a", ext="json").pack()


def test_unpack_rejects_wrong_length():
    with pytest.raises(InvalidValue):
        unpack_entry(b"\0" * 10)


def test_initialize_directory():
    directory = initialize_directory(4)
    root = directory.entries[0]
    assert root.name == "root"
    assert root.is_valid
    assert all(not entry.is_valid for entry in directory.entries[1:])
    assert all(entry.first_clstr == NO_CLUSTER for entry in directory.entries[1:])
    assert [entry.parent_idx for entry in directory.entries[1:]] == [0, 1, 2]


def test_insert_uses_first_free_slot():
    directory = initialize_directory(4)
    assert directory.find_free_idx() == 1
    index = directory.insert_entry(_folder("docs", 0))
    assert index == 1
    assert directory.entries[1].idx == 1
    assert directory.find_free_idx() == 2


def test_insert_into_full_directory():
    directory = initialize_directory(2)
    directory.insert_entry(_folder("docs", 0))
    assert directory.find_free_idx() is None
    with pytest.raises(FieldLimitationError):
        directory.insert_entry(_folder("more", 0))


def test_update_entry_out_of_range():
    with pytest.raises(FieldLimitationError):
        initialize_directory(2).update_entry(2, _folder("x", 0))


def test_size_of_file():
    directory = initialize_directory(3)
    index = directory.insert_entry(_file("a", "txt", 0))
    directory.update_size(index, 99)
    assert directory.get_size(index) == 99


def test_size_of_folder_is_refused():
    directory = initialize_directory(3)
    index = directory.insert_entry(_folder("docs", 0))
    with pytest.raises(OperationUnsuccessful):
        directory.update_size(index, 5)
    with pytest.raises(OperationUnsuccessful):
        directory.get_size(index)


def test_size_of_deleted_file_is_refused():
    directory = initialize_directory(3)
    index = directory.insert_entry(_file("a", "txt", 0))
    directory.delete_entry(index)
    with pytest.raises(OperationUnsuccessful):
        directory.get_size(index)


def test_children_and_lookup():
    directory = initialize_directory(6)
    docs = directory.insert_entry(_folder("docs", 0))
    report = directory.insert_entry(_file("report", "txt", docs))
    assert [entry.idx for entry in directory.children(0)] == [docs]
    assert directory.find_entry_by_name("report.txt", docs) == report
    assert directory.find_entry_by_name("docs", 0) == docs
    assert directory.parent_of(report) == docs
    assert directory.name_of(report) == "report"


def test_lookup_missing_name():
    directory = initialize_directory(3)
    with pytest.raises(OperationUnsuccessful):
        directory.find_entry_by_name("ghost.txt", 0)


def test_remove_tree_deletes_descendants():
    directory = initialize_directory(8)
    docs = directory.insert_entry(_folder("docs", 0))
    inner = directory.insert_entry(_folder("inner", docs))
    leaf = directory.insert_entry(_file("leaf", "md", inner))
    keep = directory.insert_entry(_file("keep", "md", 0))
    directory.remove_tree(docs)
    assert all(directory.entries[i].deleted for i in (docs, inner, leaf))
    assert not directory.entries[keep].deleted
    with pytest.raises(OperationUnsuccessful):
        directory.find_entry_by_name("docs", 0)


def test_write_then_read_round_trip(meta):
    directory = initialize_directory(meta.no_of_dir_entries)
    docs = directory.insert_entry(_folder("docs", 0))
    directory.insert_entry(_file("report", "txt", docs, size=10))
    image = io.BytesIO()
    directory.write(image, meta)
    loaded = read_directory(image, meta)
    assert loaded.entries == directory.entries


def test_write_rejects_wrong_entry_size():
    with pytest.raises(InvalidValue):
        initialize_directory(2).write(io.BytesIO(), MetaData(cluster_size=1024, dir_entry_size_in_bytes=285))


def test_read_rejects_small_cluster():
    meta = MetaData(cluster_size=100, dir_entry_size_in_bytes=ENTRY_SIZE, no_of_dir_entries=2)
    with pytest.raises(InvalidValue):
        read_directory(io.BytesIO(), meta)


def test_format_children_lists_only_children():
    directory = initialize_directory(5)
    docs = directory.insert_entry(_folder("docs", 0))
    directory.insert_entry(_file("inside", "txt", docs))
    text = directory.format_children(0)
    assert "docs" in text
    assert "inside" not in text
    assert len(text.splitlines()) == 3


def test_format_table_lists_valid_entries():
    directory = initialize_directory(5)
    directory.insert_entry(_folder("docs", 0))
    plain = directory.format_table(False)
    timed = directory.format_table(True)
    assert "root" in plain and "docs" in plain
    assert "CreationTime" in timed
    assert "CreationTime" not in plain
    assert sum("| docs" in line for line in timed.splitlines()) == 1


def test_empty_directory_has_no_free_slot():
    assert Directory().find_free_idx() is None