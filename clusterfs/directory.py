"""Directory table: one fixed-size record per file or folder."""

import struct
import time
from dataclasses import dataclass, field, replace

from .disk import disk_read, disk_write
from .utils import (
    FieldLimitationError,
    FileAccessError,
    InvalidValue,
    OperationUnsuccessful,
    current_epoch_time,
    separate_filename_and_extension,
)

ENTRY_SIZE = 288
NAME_SIZE = 256
EXT_SIZE = 4
NO_CLUSTER = 0xFFFFF
MAX_CLUSTER_SIZE = 1 << 20
ROOT_IDX = 0

_RECORD = struct.Struct(f"<II{NAME_SIZE}s{EXT_SIZE}sIIIII")
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_TABLE_COLUMNS = (
    "|   idx    |   parentIdx    |    name    |     ext     |    size    |   firstBlk   "
    "|    accessbit     |   deleted     |   isfile    |   isValid    |"
)
_TABLE_BITS = (
    "|__21-bits_|_____21-bits____|__2048-bits_|____32-bits__|___30-bits__|____20-bits___"
    "|__(r-w-x)_9-bits__|____1-bit______|____1-bit____|____1-bit_____|"
)
_TIME_COLUMNS = "    CreationTime    |     AccessTime    |     ModifyTime    |"
_TIME_BITS = "_______32-bits______|______32-bits______|______32-bits______|"


def _encode_field(text, size, label):
    raw = text.encode("utf-8")
    if len(raw) >= size:
        raise FieldLimitationError(f"{label} {text!r} does not fit in {size - 1} bytes")
    return raw


def _decode_field(raw):
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


@dataclass
class DirEntry:
    """A file or folder record of the directory."""

    idx: int = 0
    parent_idx: int = 0
    name: str = ""
    ext: str = ""
    size: int = 0
    first_clstr: int = 0
    access_bit: int = 0
    deleted: bool = False
    is_file: bool = False
    is_valid: bool = False
    creation_epoch: int = 0
    access_epoch: int = 0
    modify_epoch: int = 0

    def pack(self):
        """Serialise the entry into its 288-byte record."""
        flags = (
            (self.first_clstr & 0xFFFFF)
            | (self.access_bit & 0x1FF) << 20
            | int(bool(self.deleted)) << 29
            | int(bool(self.is_file)) << 30
            | int(bool(self.is_valid)) << 31
        )
        return _RECORD.pack(
            self.idx & 0x1FFFFF,
            self.parent_idx & 0x1FFFFF,
            _encode_field(self.name, NAME_SIZE, "name"),
            _encode_field(self.ext, EXT_SIZE, "extension"),
            self.size & 0x3FFFFFFF,
            flags,
            self.creation_epoch & 0xFFFFFFFF,
            self.access_epoch & 0xFFFFFFFF,
            self.modify_epoch & 0xFFFFFFFF,
        )


def unpack_entry(data):
    """Rebuild a :class:`DirEntry` from its 288-byte record."""
    if len(data) != ENTRY_SIZE:
        raise InvalidValue(f"directory entry must be {ENTRY_SIZE} bytes, got {len(data)}")
    idx, parent, name, ext, size, flags, created, accessed, modified = _RECORD.unpack(data)
    return DirEntry(
        idx=idx & 0x1FFFFF,
        parent_idx=parent & 0x1FFFFF,
        name=_decode_field(name),
        ext=_decode_field(ext),
        size=size & 0x3FFFFFFF,
        first_clstr=flags & 0xFFFFF,
        access_bit=(flags >> 20) & 0x1FF,
        deleted=bool(flags >> 29 & 1),
        is_file=bool(flags >> 30 & 1),
        is_valid=bool(flags >> 31 & 1),
        creation_epoch=created,
        access_epoch=accessed,
        modify_epoch=modified,
    )


def _format_time(epoch):
    if not epoch:
        return "N/A"
    return time.strftime(_TIME_FORMAT, time.localtime(epoch))


def _entries_per_cluster(meta):
    if meta.dir_entry_size_in_bytes != ENTRY_SIZE:
        raise InvalidValue(f"directory entries must be {ENTRY_SIZE} bytes")
    if meta.cluster_size == 0 or meta.cluster_size > MAX_CLUSTER_SIZE:
        raise InvalidValue(f"unusable cluster size {meta.cluster_size}")
    per_cluster = meta.cluster_size // ENTRY_SIZE
    if per_cluster == 0:
        raise InvalidValue("a cluster must hold at least one directory entry")
    return per_cluster


def _directory_offset(meta):
    return meta.fat_size_in_clstrs * meta.cluster_size


@dataclass
class Directory:
    """All directory entries, indexed by their position."""

    entries: list = field(default_factory=list)

    def _entry(self, idx):
        if not 0 <= idx < len(self.entries):
            raise FieldLimitationError(f"directory index {idx} out of range")
        return self.entries[idx]

    def find_free_idx(self):
        """Return the index of the first unused entry, or ``None`` when full."""
        return next(
            (index for index, entry in enumerate(self.entries) if not entry.is_valid),
            None,
        )

    def update_entry(self, index, entry):
        """Overwrite the entry at ``index``; the stored copy takes that index."""
        if not 0 <= index < len(self.entries):
            raise FieldLimitationError(f"directory index {index} out of range")
        self.entries[index] = replace(entry, idx=index)
        return index

    def insert_entry(self, entry):
        """Store ``entry`` in the first unused slot and return its index."""
        index = self.find_free_idx()
        if index is None:
            raise FieldLimitationError("directory is full")
        return self.update_entry(index, entry)

    @staticmethod
    def _is_live_file(entry):
        return entry.is_valid and not entry.deleted and entry.is_file

    def update_size(self, idx, size):
        """Set the size of the live file at ``idx``."""
        entry = self._entry(idx)
        if not self._is_live_file(entry):
            raise OperationUnsuccessful(f"entry {idx} is not a live file")
        entry.size = size

    def get_size(self, idx):
        """Return the size of the live file at ``idx``."""
        entry = self._entry(idx)
        if not self._is_live_file(entry):
            raise OperationUnsuccessful(f"entry {idx} is not a live file")
        return entry.size

    def delete_entry(self, idx):
        """Mark the entry at ``idx`` as deleted."""
        self._entry(idx).deleted = True

    def remove_tree(self, idx):
        """Delete the entry at ``idx`` together with everything below it."""
        for child in self.children(idx):
            self.remove_tree(child.idx)
        self.delete_entry(idx)

    def find_entry_by_name(self, filename, parent_idx):
        """Return the index of the live entry called ``filename`` under ``parent_idx``."""
        name, ext = separate_filename_and_extension(filename)
        for entry in self.entries:
            if (
                entry.is_valid
                and not entry.deleted
                and entry.parent_idx == parent_idx
                and entry.name == name
                and entry.ext == ext
            ):
                return entry.idx
        raise OperationUnsuccessful(f"Entry not found in directory: {filename!r}")

    def parent_of(self, idx):
        """Return the parent index of the entry at ``idx``."""
        return self._entry(idx).parent_idx

    def name_of(self, idx):
        """Return the name of the entry at ``idx``."""
        return self._entry(idx).name

    def children(self, parent_idx):
        """Return the live entries whose parent is ``parent_idx``."""
        return [
            entry
            for entry in self.entries
            if entry.is_valid
            and not entry.deleted
            and entry.parent_idx == parent_idx
            and entry.idx != parent_idx
        ]

    def format_children(self, parent_idx):
        """Return a listing of the children of ``parent_idx``."""
        header = (
            f"| {'idx':<10} | {'parentIdx':<12} | {'name':<20} | {'ext':<5} | "
            f"{'size':<10} | {'firstBlk':<10} | {'accessbit':<12} | "
            f"{'CreationTime':<15} | {'AccessTime':<15} | {'ModifyTime':<15} |"
        )
        lines = [header, "|" + "-" * (len(header) - 2) + "|"]
        for entry in self.children(parent_idx):
            lines.append(
                f"| {entry.idx:<10} | {entry.parent_idx:<12} | {entry.name[:20]:<20} | "
                f"{entry.ext:<5} | {entry.size:<10} | {entry.first_clstr:<10} | "
                f"{entry.access_bit:03o}          | {entry.creation_epoch:<15} | "
                f"{entry.access_epoch:<15} | {entry.modify_epoch:<15} |"
            )
        return "\n".join(lines)

    def format_table(self, with_time=False):
        """Return a table of every valid entry, optionally with its times."""
        columns = _TABLE_COLUMNS + (_TIME_COLUMNS if with_time else "")
        bits = _TABLE_BITS + (_TIME_BITS if with_time else "")
        rule = "_" * len(columns)
        lines = [rule, columns, bits]
        for entry in self.entries:
            if not entry.is_valid:
                continue
            row = (
                f"| {entry.idx:<8} | {entry.parent_idx:<14} | {entry.name:<10} | "
                f"{entry.ext:<10}  | {entry.size:<10} | {entry.first_clstr:<12} | "
                f"{entry.access_bit:<16} | {int(entry.deleted):<12}  | "
                f"{int(entry.is_file):<10}  |  {int(entry.is_valid):<10}  |"
            )
            if with_time:
                row += (
                    f" {_format_time(entry.creation_epoch):<18} |"
                    f" {_format_time(entry.access_epoch):<18} |"
                    f" {_format_time(entry.modify_epoch):<18} |"
                )
                lines.append(row)
            else:
                lines.append(row)
                lines.append("|" + "_" * (len(columns) - 2) + "|")
        if with_time:
            lines.append(rule)
        return "\n".join(lines)

    def write(self, file, meta):
        """Store every entry on disk right after the FAT clusters."""
        if file is None:
            raise FileAccessError()
        per_cluster = _entries_per_cluster(meta)
        offset = _directory_offset(meta)
        for start in range(0, len(self.entries), per_cluster):
            block = b"".join(entry.pack() for entry in self.entries[start:start + per_cluster])
            disk_write(file, offset, block.ljust(meta.cluster_size, b"\0"))
            offset += meta.cluster_size


def initialize_directory(entry_count):
    """Return a directory holding only the root folder and unused slots."""
    if entry_count <= 0:
        raise InvalidValue("a directory needs at least one entry")
    now = current_epoch_time()
    root = DirEntry(
        idx=ROOT_IDX,
        parent_idx=ROOT_IDX,
        name="root",
        first_clstr=0,
        is_valid=True,
        creation_epoch=now,
        access_epoch=now,
        modify_epoch=now,
    )
    unused = (
        DirEntry(idx=index, parent_idx=index - 1, first_clstr=NO_CLUSTER)
        for index in range(1, entry_count)
    )
    return Directory([root, *unused])


def read_directory(file, meta):
    """Load the ``meta.no_of_dir_entries`` entries stored on disk."""
    if file is None:
        raise FileAccessError()
    per_cluster = _entries_per_cluster(meta)
    entries = []
    offset = _directory_offset(meta)
    while len(entries) < meta.no_of_dir_entries:
        block = disk_read(file, offset, meta.cluster_size)
        offset += meta.cluster_size
        take = min(per_cluster, meta.no_of_dir_entries - len(entries))
        entries.extend(
            unpack_entry(block[slot * ENTRY_SIZE:(slot + 1) * ENTRY_SIZE])
            for slot in range(take)
        )
    return Directory(entries)