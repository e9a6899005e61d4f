import pytest

from clusterfs.directory import initialize_directory
from clusterfs.folders import create_folder
from clusterfs.metadata import compute_meta_data
from clusterfs.utils import FieldLimitationError, OperationUnsuccessful


@pytest.fixture
def meta():
    return compute_meta_data(65536, 1024, 4, 64, 8)


def test_create_folder(meta):
    directory = initialize_directory(meta.no_of_dir_entries)
    idx = create_folder(directory, "docs", 0, meta)
    entry = directory.entries[idx]
    assert entry.name == "docs"
    assert entry.ext == ""
    assert entry.is_valid and not entry.is_file
    assert entry.parent_idx == 0
    assert [child.idx for child in directory.children(0)] == [idx]


def test_folder_name_keeps_dots(meta):
    directory = initialize_directory(meta.no_of_dir_entries)
    idx = create_folder(directory, "v1.2", 0, meta)
    assert directory.name_of(idx) == "v1.2"
    assert directory.entries[idx].ext == ""


def test_nested_folders(meta):
    directory = initialize_directory(meta.no_of_dir_entries)
    outer = create_folder(directory, "outer", 0, meta)
    inner = create_folder(directory, "inner", outer, meta)
    assert directory.parent_of(inner) == outer
    directory.remove_tree(outer)
    assert directory.entries[inner].deleted


def test_folder_cannot_hold_size(meta):
    directory = initialize_directory(meta.no_of_dir_entries)
    idx = create_folder(directory, "docs", 0, meta)
    with pytest.raises(OperationUnsuccessful):
        directory.get_size(idx)


def test_folder_name_too_long(meta):
    directory = initialize_directory(meta.no_of_dir_entries)
    with pytest.raises(FieldLimitationError):
        create_folder(directory, "d" * (meta.max_file_name_in_bytes + 1), 0, meta)


def test_folder_in_full_directory(meta):
    directory = initialize_directory(1)
    with pytest.raises(FieldLimitationError):
        create_folder(directory, "docs", 0, meta)