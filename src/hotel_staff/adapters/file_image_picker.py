"""Image picker that reads files supplied on the command line."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from hotel_staff.domain.images import LocalImage
from hotel_staff.services.menus import ImagePickerError, ImageSource


@dataclass
class FileImagePicker:
    """Picker over a fixed list of local files.

    Both sources resolve to the same files; permission is granted when every
    file is readable.
    """

    paths: list[Path] = field(default_factory=list)

    async def request_permission(self, source: ImageSource) -> bool:
        """Grant access when all configured files are readable."""
        return all(path.is_file() for path in self.paths)

    async def pick(
        self, source: ImageSource, multiple: bool = False
    ) -> list[LocalImage]:
        """Return the configured files; an empty list means cancelled."""
        paths = self.paths if multiple else self.paths[:1]
        try:
            return [
                await asyncio.to_thread(LocalImage.from_path, path) for path in paths
            ]
        except OSError as exc:
            raise ImagePickerError(f"Cannot read image: {exc}") from exc
