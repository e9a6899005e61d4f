"""The file allocation table that chains the clusters of each file."""

import struct
from dataclasses import dataclass, field

from .disk import disk_read, disk_write
from .utils import FieldLimitationError, FileAccessError, InvalidValue, OperationUnsuccessful

END_OF_CHAIN = 0xFFFFFFFF
FAT_ENTRY_SIZE = 4
MAX_CLUSTER_SIZE = 1 << 20
_PREVIEW_ENTRIES = 20


def _entries_per_cluster(meta):
    if meta.cluster_size == 0 or meta.cluster_size > MAX_CLUSTER_SIZE:
        raise FieldLimitationError(f"unusable cluster size {meta.cluster_size}")
    per_cluster = meta.cluster_size // FAT_ENTRY_SIZE
    if per_cluster == 0:
        raise InvalidValue("a cluster must hold at least one FAT entry")
    return per_cluster


def _signed(value):
    return value - (1 << 32) if value >= 1 << 31 else value


@dataclass
class Fat:
    """Next-cluster links, one per data cluster; ``END_OF_CHAIN`` ends a chain."""

    entries: list = field(default_factory=list)

    def _check_index(self, index):
        if not 0 <= index < len(self.entries):
            raise FieldLimitationError(f"cluster {index} is outside the FAT")

    def write(self, file, meta):
        """Store the table on disk, starting one cluster into the image."""
        if file is None:
            raise FileAccessError()
        per_cluster = _entries_per_cluster(meta)
        offset = meta.cluster_size
        for start in range(0, len(self.entries), per_cluster):
            chunk = self.entries[start:start + per_cluster]
            try:
                packed = struct.pack(f"<{len(chunk)}I", *chunk)
            except struct.error as exc:
                raise InvalidValue(f"FAT entry out of range: {exc}") from exc
            disk_write(file, offset, packed.ljust(meta.cluster_size, b"\0"))
            offset += meta.cluster_size

    def extend_link(self, prev, nxt):
        """Chain ``nxt`` after ``prev`` and make it the end of the chain."""
        self._check_index(prev)
        self._check_index(nxt)
        self.entries[prev] = nxt
        self.entries[nxt] = END_OF_CHAIN

    def add_link(self, prev_extended, first_free):
        """Append the cluster ``first_free`` after ``prev_extended``.

        Returns the index of the next free cluster.
        """
        if first_free == END_OF_CHAIN:
            raise OperationUnsuccessful("NO space left in disk !")
        self._check_index(first_free)
        self._check_index(prev_extended)
        next_free = self.entries[first_free]
        self.entries[prev_extended] = first_free
        self.entries[first_free] = END_OF_CHAIN
        return next_free

    def describe(self):
        """Return the first links of the table as text."""
        preview = self.entries[:_PREVIEW_ENTRIES]
        return "".join(
            f"{index} -> {_signed(value)} -- " for index, value in enumerate(preview)
        )


def initialize_fat(entry_count):
    """Return a table in which every cluster links to the next one."""
    if entry_count <= 0:
        raise InvalidValue("a FAT needs at least one entry")
    entries = list(range(1, entry_count + 1))
    entries[-1] = END_OF_CHAIN
    return Fat(entries)


def read_fat(file, meta):
    """Load the table of ``meta.fat_entries`` entries from disk."""
    if file is None:
        raise FileAccessError()
    per_cluster = _entries_per_cluster(meta)
    entries = []
    offset = meta.cluster_size
    while len(entries) < meta.fat_entries:
        block = disk_read(file, offset, meta.cluster_size)
        offset += meta.cluster_size
        take = min(per_cluster, meta.fat_entries - len(entries))
        entries.extend(struct.unpack_from(f"<{take}I", block))
    return Fat(entries)