"""A FAT-style file system stored inside a single disk image file: layout,
allocation table, directory table, cluster I/O and command parsing."""

__version__ = "0.1.0"