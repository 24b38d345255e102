"""Local image assets selected for upload."""

from dataclasses import dataclass
from pathlib import Path

_EXTENSION_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "heic": "image/heic",
    "gif": "image/gif",
}


@dataclass(frozen=True)
class LocalImage:
    """An image picked from the camera or gallery, held in memory."""

    name: str
    content: bytes
    mime_type: str

    @classmethod
    def from_bytes(cls, name: str, content: bytes) -> "LocalImage":
        return cls(
            name=name, content=content, mime_type=detect_mime_type(name, content)
        )

    @classmethod
    def from_path(cls, path: Path) -> "LocalImage":
        return cls.from_bytes(path.name, path.read_bytes())

    def as_upload(self) -> tuple[str, bytes, str]:
        """Return the (filename, content, content type) tuple httpx expects."""
        return (self.name, self.content, self.mime_type)


def detect_mime_type(name: str, content: bytes) -> str:
    """Infer an image MIME type from file signatures, then the file extension."""
    if content.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if content.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if content[:4] == b"RIFF" and content[8:12] == b"WEBP":
        return "image/webp"
    extension = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return _EXTENSION_TYPES.get(extension, "image/jpeg")
