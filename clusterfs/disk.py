"""Raw cluster I/O on the disk image."""

from itertools import cycle

from .utils import FieldLimitationError, FileAccessError, InvalidValue, OperationUnsuccessful

DISK_XOR_PAD = b"123"
FIRST_FREE_OFFSET = 0
FIRST_FREE_SIZE = 3
MAX_FIRST_FREE = 0xFFFFF


def xor_cipher(data, key=DISK_XOR_PAD):
    """XOR ``data`` with ``key`` repeated; applying it twice restores the data."""
    if not key:
        raise InvalidValue("cipher key must not be empty")
    return bytes(a ^ b for a, b in zip(data, cycle(key)))


def _require(file):
    if file is None:
        raise FileAccessError()


def disk_read(file, offset, size):
    """Read and decode ``size`` bytes at ``offset``.

    Bytes beyond the end of the image read as zero. The file position
    is left at the start afterwards.
    """
    _require(file)
    try:
        file.seek(offset)
        raw = file.read(size)
    except (OSError, ValueError) as exc:
        raise OperationUnsuccessful(f"cannot read {size} bytes at {offset}: {exc}") from exc
    data = xor_cipher(raw) + bytes(size - len(raw))
    file.seek(0)
    return data


def disk_write(file, offset, data):
    """Encode ``data`` and write it at ``offset``."""
    _require(file)
    encoded = xor_cipher(data)
    try:
        file.seek(offset)
        written = file.write(encoded)
    except (OSError, ValueError) as exc:
        raise OperationUnsuccessful(f"cannot write {len(data)} bytes at {offset}: {exc}") from exc
    if written is not None and written < len(encoded):
        raise OperationUnsuccessful("Error writing to file")
    file.seek(0)


def update_first_free(file, first_free):
    """Store the 20-bit index of the first free cluster."""
    if not 0 <= first_free <= MAX_FIRST_FREE:
        raise FieldLimitationError()
    _require(file)
    record = bytes([
        (first_free >> 12) & 0xFF,
        (first_free >> 4) & 0xFF,
        (first_free & 0xF) << 4,
    ])
    disk_write(file, FIRST_FREE_OFFSET, record)


def read_first_free(file):
    """Return the stored index of the first free cluster."""
    _require(file)
    high, middle, low = disk_read(file, FIRST_FREE_OFFSET, FIRST_FREE_SIZE)
    return (high << 12) | (middle << 4) | (low >> 4)


def create_disk(path, size):
    """Create an empty image whose last byte sits at offset ``size``."""
    try:
        with open(path, "wb") as handle:
            handle.seek(size)
            handle.write(b"\0")
    except (OSError, ValueError) as exc:
        raise FileAccessError(f"cannot create disk {path}: {exc}") from exc