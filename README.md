# clusterfs

`clusterfs` keeps a small FAT-style file system inside one ordinary file, a disk
image. It is a library: it computes the layout of an image, writes and reads the
allocation table and the directory table, and stores file contents in chains of
clusters.

## Image layout

Positions in the image, for a cluster size `cs`:

- offset 0: a three-byte register holding the 20-bit index of the first free
  cluster (`clusterfs.disk.update_first_free` / `read_first_free`);
- offset `cs`: the file allocation table, one little-endian 32-bit link per
  cluster (`Fat.write`, `read_fat`);
- offset `meta.fat_size_in_clstrs * cs`: the directory table, 288-byte entries
  packed into clusters (`Directory.write`, `read_directory`);
- offset `(meta.cluster_offset_in_clstrs + n) * cs`: data cluster `n`.

Everything goes through `clusterfs.disk.disk_write` and `disk_read`, which
scramble and unscramble the bytes with `xor_cipher` (a repeating XOR pad, so
applying it twice gives the data back). Reading past the end of the image yields
zero bytes. `create_disk(path, size)` creates an empty image whose last byte sits
at offset `size`.

## Layout and limits

`compute_meta_data` works out the geometry from five parameters and returns a
`MetaData`. It raises `LimitationError` when a parameter exceeds what the format
allows and `InvalidValue` for negative or zero-sized values:

```python
from clusterfs.metadata import compute_meta_data

meta = compute_meta_data(
    disk_size=64 * 1024 * 1024,
    cluster_size=1024,
    max_file_size_in_clusters=128,
    max_file_name_in_bytes=64,
    max_folders=1024,
)
print(meta.describe())
```

`write_meta_data(path, meta)` and `read_meta_data(path)` store and load the
metadata in a file of its own; `MetaData.pack` and `unpack_meta_data` give and
take the raw record.

## Formatting an image

```python
from clusterfs.formatting import format_disk

with open("disk.img", "w+b") as disk:
    meta, fat, directory, first_free = format_disk(
        disk, "disk.img", 1024 * 1024, 1024, 16, 64, 32, meta_path="meta.bin"
    )
```

`format_disk` computes the metadata, writes it to `meta_path` (default
`meta_data.bin`), creates the image at `disk_name`, then writes to the open file
`disk` the free-cluster register (set to 5), a fresh allocation table in which
every cluster links to the next, and a directory holding only the root folder.
It returns those structures as read back from `disk`.

## Working with the directory

```python
from clusterfs.directory import initialize_directory
from clusterfs.files import create_file
from clusterfs.folders import create_folder

directory = initialize_directory(meta.no_of_dir_entries)
docs = create_folder(directory, "docs", 0, meta)
notes = create_file(directory, "notes.txt", docs, meta)

assert directory.find_entry_by_name("notes.txt", docs) == notes
print(directory.format_children(docs))
print(directory.format_table(with_time=True))
```

Entry 0 is always the root folder. `create_file` splits the name at its last dot
into name and extension. Names longer than `meta.max_file_name_in_bytes` raise
`FieldLimitationError`, and so does inserting into a full table.
`find_entry_by_name` raises `OperationUnsuccessful` when nothing matches.
`Directory.remove_tree` marks an entry and everything under it as deleted;
`children`, `parent_of`, `name_of`, `get_size` and `update_size` give access to
single entries. `DirEntry.pack` and `unpack_entry` convert one entry to and from
its 288-byte record.

## File contents

```python
from clusterfs.fat import initialize_fat
from clusterfs.files import read_from_file, write_in_file

fat = initialize_fat(meta.fat_entries)
first_free = write_in_file(disk, directory, fat, first_free, notes, "hello\n", meta)
assert read_from_file(disk, directory, fat, notes, meta) == b"hello\n"
```

`write_in_file` accepts text (encoded as UTF-8) or bytes, chains the clusters it
uses in the `Fat` starting at `first_free`, records the size in the directory and
returns the next free cluster. `read_from_file` follows the chain and returns the
stored bytes. `Fat.add_link` and `Fat.extend_link` edit chains directly; running
out of clusters raises `OperationUnsuccessful`. `read_file_content(stream)` reads
lines until one that is just `tixe` and returns the text before it.

## Commands

`clusterfs.commands.parse_command("cd ..")` returns `(Command.CD_PARENT, "..")`;
it recognises `cd`, `ls`, `cat`, `touch`, `vim`, `mkdir`, `rmdir`, `rm` and
`exit`, and anything else gives `Command.INVALID`. `input_command(stream)` reads
one line (standard input by default) and parses it.

## What it does not do

There is no interactive shell and no command-line program: commands are only
parsed, not carried out, and nothing keeps track of a current folder. The
allocation table, directory and free-cluster register live in memory and must be
written back with `Fat.write`, `Directory.write` and `update_first_free`
yourself.

## Errors

All errors derive from `clusterfs.utils.FsError`: `LimitationError`,
`FieldLimitationError`, `FileAccessError`, `OperationUnsuccessful` and
`InvalidValue`.