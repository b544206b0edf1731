"""File helpers for attachments and generated media.

Paths accept ``~`` and environment variables. Relative paths stay relative.
"""

import base64
import os
from dataclasses import dataclass
from enum import Enum

S3_PREFIX = "s3://"

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}
VIDEO_EXTENSIONS = {"mp4", "mov", "mkv", "webm", "flv", "mpeg", "mpg", "wmv", "3gp"}
DOCUMENT_EXTENSIONS = {"csv", "doc", "docx", "html", "md", "pdf", "txt", "xls", "xlsx"}


class FileType(Enum):
    IMAGE = "image"
    VIDEO = "video"
    DOCUMENT = "document"
    UNKNOWN = "unknown"


class Location(Enum):
    LOCAL = "local"
    S3 = "s3"


def expand(path: str) -> str:
    return os.path.expandvars(os.path.expanduser(path))


def extension(path: str) -> str:
    """Extension without the dot, '' when there is none."""
    name = os.path.basename(expand(path))
    _, ext = os.path.splitext(name)
    return ext[1:] if ext else ""


def stem(path: str) -> str:
    name = os.path.basename(expand(path))
    root, _ = os.path.splitext(name)
    return root


def read_bytes(path: str) -> bytes:
    with open(expand(path), "rb") as f:
        return f.read()


def read_base64(path: str) -> str:
    return base64.b64encode(read_bytes(path)).decode("ascii")


def write_base64(path: str, data: str) -> str:
    target = expand(path)
    with open(target, "wb") as f:
        f.write(base64.b64decode(data))
    return target


def _classify(ext: str) -> FileType:
    lowered = ext.lower()
    if lowered in IMAGE_EXTENSIONS:
        return FileType.IMAGE
    if lowered in VIDEO_EXTENSIONS:
        return FileType.VIDEO
    if lowered in DOCUMENT_EXTENSIONS:
        return FileType.DOCUMENT
    return FileType.UNKNOWN


@dataclass
class FileReference:
    path: str
    extension: str
    stem: str
    file_type: FileType
    location: Location

    @classmethod
    def from_path(cls, path: str) -> "FileReference":
        if path.startswith(S3_PREFIX):
            name, dotted = os.path.splitext(path.rsplit("/", 1)[-1])
            ext = dotted[1:]
            return cls(path, ext, name, _classify(ext), Location.S3)
        ext = extension(path)
        return cls(path, ext, stem(path), _classify(ext), Location.LOCAL)


@dataclass
class DownloadLocation:
    """Where a response asset was saved; kind is FileType.IMAGE or FileType.VIDEO."""

    kind: FileType
    path: str

    def describe(self) -> str:
        return f"Saved {self.kind.value} to: {self.path}"
