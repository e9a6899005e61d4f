"""Creating folders in the directory."""

from .directory import DirEntry
from .utils import FieldLimitationError, current_epoch_time


def create_folder(directory, name, parent_idx, meta):
    """Add a folder called ``name`` under ``parent_idx``; return its index."""
    if len(name) > meta.max_file_name_in_bytes:
        raise FieldLimitationError(f"folder name {name!r} is too long")
    now = current_epoch_time()
    entry = DirEntry(
        parent_idx=parent_idx,
        name=name,
        first_clstr=0,
        is_file=False,
        is_valid=True,
        creation_epoch=now,
        access_epoch=now,
        modify_epoch=now,
    )
    return directory.insert_entry(entry)