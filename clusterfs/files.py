"""Creating files and moving their contents between memory and disk."""

import sys

from .directory import DirEntry
from .disk import disk_read, disk_write
from .fat import END_OF_CHAIN
from .utils import (
    FieldLimitationError,
    InvalidValue,
    OperationUnsuccessful,
    current_epoch_time,
    separate_filename_and_extension,
)

END_OF_INPUT = "tixe"
_PROMPT = f"Enter the file content (type '{END_OF_INPUT}' on a new line to stop):"


def _cluster_offset(meta, cluster):
    return (meta.cluster_offset_in_clstrs + cluster) * meta.cluster_size


def _check_cluster_size(meta):
    if meta.cluster_size <= 0:
        raise InvalidValue(f"unusable cluster size {meta.cluster_size}")


def create_file(directory, name, parent_idx, meta):
    """Add an empty file called ``name`` under ``parent_idx``; return its index."""
    if len(name) > meta.max_file_name_in_bytes:
        raise FieldLimitationError(f"file name {name!r} is too long")
    now = current_epoch_time()
    base, ext = separate_filename_and_extension(name)
    entry = DirEntry(
        parent_idx=parent_idx,
        name=base,
        ext=ext,
        first_clstr=0,
        is_file=True,
        is_valid=True,
        creation_epoch=now,
        access_epoch=now,
        modify_epoch=now,
    )
    return directory.insert_entry(entry)


def read_file_content(stream=None):
    """Read lines until one that holds only ``tixe`` and return the text before it.

    Reads standard input, after a prompt, when no stream is given.
    """
    if stream is None:
        print(_PROMPT)
        stream = sys.stdin
    lines = []
    for line in iter(stream.readline, ""):
        if line in (END_OF_INPUT, END_OF_INPUT + "\n"):
            break
        lines.append(line)
    return "".join(lines)


def write_in_file(file, directory, fat, first_free, idx, content, meta):
    """Write ``content`` into the file at ``idx``, taking clusters from the free list.

    The clusters are chained in ``fat`` starting at ``first_free``, and the
    index of the next free cluster is returned.
    """
    if file is None or directory is None or fat is None or content is None:
        raise InvalidValue()
    if not 0 <= idx < len(directory.entries):
        raise FieldLimitationError(f"directory index {idx} out of range")
    _check_cluster_size(meta)
    data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
    size = meta.cluster_size

    entry = directory.entries[idx]
    entry.first_clstr = first_free
    prev = current = first_free
    for start in range(0, len(data), size):
        if current == END_OF_CHAIN:
            raise OperationUnsuccessful("NO space left in disk !")
        disk_write(file, _cluster_offset(meta, current), data[start:start + size].ljust(size, b"\0"))
        first_free = fat.add_link(prev, current)
        prev = current
        current = first_free

    directory.update_size(idx, len(data))
    return first_free


def read_from_file(file, directory, fat, idx, meta):
    """Return the bytes stored in the file at ``idx`` by following its cluster chain."""
    if file is None or directory is None or fat is None:
        raise InvalidValue()
    if not 0 <= idx < len(directory.entries):
        raise FieldLimitationError(f"directory index {idx} out of range")
    _check_cluster_size(meta)

    entry = directory.entries[idx]
    total = entry.size
    current = entry.first_clstr
    chunks = []
    read = 0
    while current != END_OF_CHAIN and read < total:
        if not 0 <= current < len(fat.entries):
            raise OperationUnsuccessful(f"cluster {current} is outside the FAT")
        block = disk_read(file, _cluster_offset(meta, current), meta.cluster_size)
        take = min(meta.cluster_size, total - read)
        chunks.append(block[:take])
        read += take
        current = fat.entries[current]
    return b"".join(chunks)