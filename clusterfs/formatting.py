"""Formatting a fresh disk image."""

from .directory import initialize_directory, read_directory
from .disk import create_disk, read_first_free, update_first_free
from .fat import initialize_fat, read_fat
from .metadata import compute_meta_data, write_meta_data
from .utils import FileAccessError

INITIAL_FIRST_FREE = 5
DEFAULT_META_PATH = "meta_data.bin"


def format_disk(
    disk,
    disk_name,
    disk_size,
    cluster_size,
    max_file_size_in_clusters,
    max_file_name_in_bytes,
    max_folders,
    meta_path=DEFAULT_META_PATH,
):
    """Lay out a new file system and write its structures to ``disk``.

    The metadata is stored at ``meta_path`` and an empty image is created
    at ``disk_name``. Returns ``(meta, fat, directory, first_free)`` as
    read back from ``disk``.
    """
    if disk is None:
        raise FileAccessError()
    meta = compute_meta_data(
        disk_size,
        cluster_size,
        max_file_size_in_clusters,
        max_file_name_in_bytes,
        max_folders,
    )
    write_meta_data(meta_path, meta)
    create_disk(disk_name, meta.total_size)

    directory = initialize_directory(meta.no_of_dir_entries)
    fat = initialize_fat(meta.fat_entries)

    update_first_free(disk, INITIAL_FIRST_FREE)
    first_free = read_first_free(disk)

    fat.write(disk, meta)
    fat = read_fat(disk, meta)

    directory.write(disk, meta)
    directory = read_directory(disk, meta)

    return meta, fat, directory, first_free