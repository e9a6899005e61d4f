"""Shared helpers and the error hierarchy of the file system."""

import time


class FsError(Exception):
    """Base class of every error raised by the file system."""

    default_message = "file system operation failed"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class LimitationError(FsError):
    """A value exceeds a hard limit of the disk layout."""

    default_message = "DISK LIMITATION EXCEEDED !"


class FieldLimitationError(FsError):
    """A value does not fit into the field that must hold it."""

    default_message = "FIELD LIMITATION EXCEEDED !"


class FileAccessError(FsError):
    """The backing file is missing or cannot be opened."""

    default_message = "FILE NOT OPENING !"


class OperationUnsuccessful(FsError):
    """An operation on the disk or its structures failed."""

    default_message = "THE LATEST OPERATION PERFORMED IS UNSUCCESSFUL !"


class InvalidValue(FsError):
    """An argument has a value that cannot be used."""

    default_message = "THE VALUE IS INVALID !"


def current_epoch_time():
    """Return the current Unix time as an unsigned 32-bit integer."""
    return int(time.time()) & 0xFFFFFFFF


def separate_filename_and_extension(filename):
    """Split ``filename`` at its last dot into ``(name, extension)``.

    A leading dot (as in ``.profile``) does not start an extension.
    """
    dot = filename.rfind(".")
    if dot > 0:
        return filename[:dot], filename[dot + 1:]
    return filename, ""