"""Layout parameters of a disk and their on-disk record."""

import struct
from dataclasses import astuple, dataclass

from .utils import FileAccessError, InvalidValue, LimitationError, OperationUnsuccessful

MAX_DISK_SIZE = 1.099511628e12
MAX_CLUSTER_SIZE = 1048576
MAX_FILE_SIZE_IN_CLUSTERS = 1024
MAX_FILE_NAME_IN_BYTES = 255
MAX_FOLDERS = 1024
MAX_DIR_SIZE = 597688320
MAX_TOTAL_SIZE = 1.100111938e12
DIR_ENTRY_SIZE = 288
FAT_ENTRY_SIZE = 4
FIRST_FREE_REGISTER_SIZE = 3

# The offset limit is compared as an unsigned 32-bit value.
_CLUSTER_OFFSET_LIMIT = 4782555155 & 0xFFFFFFFF
_TOTAL_SIZE_REGISTER_BYTES = 20 // 8

_LAYOUT = struct.Struct("<QIIHIBHIIIHQQIIIIBIIQI")


def _bits(value, width):
    return value & ((1 << width) - 1)


def _ceil_div(value, divisor):
    return -(-value // divisor)


@dataclass
class MetaData:
    """Sizes, counts and offsets that describe a formatted disk."""

    disk_size: int = 0
    cluster_size: int = 0
    no_of_clusters_for_files: int = 0
    max_file_size_in_clusters: int = 0
    max_file_size: int = 0
    max_file_name_in_bytes: int = 0
    max_folders: int = 0
    max_files: int = 0
    max_full_size_files: int = 0
    no_of_dir_entries: int = 0
    dir_entry_size_in_bytes: int = 0
    dir_size: int = 0
    dir_size_in_clstrs: int = 0
    fat_entries: int = 0
    fat_size: int = 0
    fat_size_in_clstrs: int = 0
    first_free_clstr: int = 0
    free_clstr_reg_idx: int = 0
    cluster_offset_in_bytes: int = 0
    cluster_offset_in_clstrs: int = 0
    total_size: int = 0
    total_clstrs: int = 0

    def describe(self):
        """Return a human-readable listing of every parameter."""
        lines = [
            f"DISK_SIZE: {self.disk_size} Bytes",
            f"CLUSTER_SIZE: {self.cluster_size} Bytes",
            f"NO_OF_CLUSTERS: {self.no_of_clusters_for_files}",
            f"MAX_FILE_SIZE_IN_CLUSTERS: {self.max_file_size_in_clusters} clusters",
            f"MAX_FILE_SIZE: {self.max_file_size} Bytes",
            f"MAX_FILE_NAME_IN_BYTES: {self.max_file_name_in_bytes} Bytes",
            f"MAX_FOLDERS: {self.max_folders}",
            f"MAX_FILES: {self.max_files}",
            f"MAX_FULL_SIZE_FILES: {self.max_full_size_files} files",
            f"NO_OF_DIR_ENTRIES: {self.no_of_dir_entries} entries",
            f"DIR_ENTRY_SIZE_IN_BYTES: {self.dir_entry_size_in_bytes} bits",
            f"DIR_SIZE: {self.dir_size} bytes",
            f"DIR_SIZE_IN_CLSTRS: {self.dir_size_in_clstrs} clusters",
            f"FAT_ENTRIES: {self.fat_entries} entries",
            f"FAT_SIZE: {self.fat_size} bytes",
            f"FAT_SIZE_IN_CLSTRS: {self.fat_size_in_clstrs} clusters",
            f"FIRST_FREE_CLSTR: {self.first_free_clstr}",
            f"FREE_CLSTR_REG_IDX: {self.free_clstr_reg_idx}",
            f"CLUSTER_OFFSET_IN_BYTES: {self.cluster_offset_in_bytes} bytes",
            f"CLUSTER_OFFSET_IN_CLSTRS: {self.cluster_offset_in_clstrs} clusters",
            f"TOTAL_SIZE: {self.total_size} bytes",
            f"TOTAL_CLSTRS: {self.total_clstrs} ",
        ]
        return "\n".join(lines)

    def pack(self):
        """Serialise the parameters into their fixed binary record."""
        try:
            return _LAYOUT.pack(*astuple(self))
        except struct.error as exc:
            raise InvalidValue(f"metadata field out of range: {exc}") from exc


def unpack_meta_data(data):
    """Rebuild a :class:`MetaData` from the bytes made by :meth:`MetaData.pack`."""
    if len(data) != _LAYOUT.size:
        raise OperationUnsuccessful(
            f"metadata record must be {_LAYOUT.size} bytes, got {len(data)}"
        )
    return MetaData(*_LAYOUT.unpack(data))


def compute_meta_data(
    disk_size,
    cluster_size,
    max_file_size_in_clusters,
    max_file_name_in_bytes,
    max_folders,
):
    """Derive the full disk layout from the formatting parameters."""
    if min(disk_size, cluster_size, max_file_size_in_clusters,
           max_file_name_in_bytes, max_folders) < 0:
        raise InvalidValue("formatting parameters must not be negative")

    if disk_size > MAX_DISK_SIZE:
        raise LimitationError()
    disk = _bits(disk_size, 40)
    if cluster_size > MAX_CLUSTER_SIZE:
        raise LimitationError()
    cluster = _bits(cluster_size, 20)
    if cluster == 0:
        raise InvalidValue("cluster size must be between 1 and 2**20 - 1 bytes")
    clusters = _bits(disk // cluster, 20)

    if max_file_size_in_clusters > MAX_FILE_SIZE_IN_CLUSTERS:
        raise LimitationError()
    file_clusters = _bits(max_file_size_in_clusters, 10)
    max_file_size = _bits(file_clusters * cluster, 30)
    if max_file_name_in_bytes > MAX_FILE_NAME_IN_BYTES:
        raise LimitationError()
    if max_folders > MAX_FOLDERS:
        raise LimitationError()
    folders = _bits(max_folders, 11)
    max_files = clusters
    if max_file_size == 0:
        raise InvalidValue("maximum file size must not be zero")
    full_size_files = _bits(disk // max_file_size, 19)

    entries = _bits(folders + max_files, 21)
    dir_size = _bits(DIR_ENTRY_SIZE * entries, 33)
    if dir_size > MAX_DIR_SIZE:
        raise LimitationError()
    dir_clusters = _ceil_div(dir_size, cluster)

    fat_entries = clusters
    fat_size = fat_entries * FAT_ENTRY_SIZE
    fat_clusters = _ceil_div(FIRST_FREE_REGISTER_SIZE + fat_size, cluster)

    offset_bytes = (FIRST_FREE_REGISTER_SIZE + fat_size + dir_size) & 0xFFFFFFFF
    if offset_bytes > _CLUSTER_OFFSET_LIMIT:
        raise LimitationError()
    offset_clusters = (fat_clusters + dir_clusters) & 0xFFFFFFFF

    total = _TOTAL_SIZE_REGISTER_BYTES + fat_size + dir_size + disk
    if total > MAX_TOTAL_SIZE:
        raise LimitationError()
    total_clusters = _ceil_div(total, cluster) & 0xFFFFFFFF

    return MetaData(
        disk_size=disk,
        cluster_size=cluster,
        no_of_clusters_for_files=clusters,
        max_file_size_in_clusters=file_clusters,
        max_file_size=max_file_size,
        max_file_name_in_bytes=max_file_name_in_bytes,
        max_folders=folders,
        max_files=max_files,
        max_full_size_files=full_size_files,
        no_of_dir_entries=entries,
        dir_entry_size_in_bytes=DIR_ENTRY_SIZE,
        dir_size=dir_size,
        dir_size_in_clstrs=dir_clusters,
        fat_entries=fat_entries,
        fat_size=fat_size,
        fat_size_in_clstrs=fat_clusters,
        first_free_clstr=0,
        free_clstr_reg_idx=0,
        cluster_offset_in_bytes=offset_bytes,
        cluster_offset_in_clstrs=offset_clusters,
        total_size=total,
        total_clstrs=total_clusters,
    )


def write_meta_data(path, meta):
    """Store ``meta`` in the file at ``path``."""
    record = meta.pack()
    try:
        with open(path, "wb") as handle:
            handle.write(record)
    except OSError as exc:
        raise FileAccessError(f"cannot write metadata to {path}: {exc}") from exc


def read_meta_data(path):
    """Load the metadata stored in the file at ``path``."""
    try:
        with open(path, "rb") as handle:
            data = handle.read(_LAYOUT.size)
    except OSError as exc:
        raise FileAccessError(f"cannot read metadata from {path}: {exc}") from exc
    if len(data) < _LAYOUT.size:
        raise OperationUnsuccessful("Failed to read metadata from file")
    return unpack_meta_data(data)