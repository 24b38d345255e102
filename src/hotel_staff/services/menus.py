"""Daily menu publishing and history reconciliation."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from pydantic import ValidationError

from hotel_staff.adapters.hotel_api_client import HotelApiClient
from hotel_staff.domain.images import LocalImage
from hotel_staff.domain.menus import MenuHistoryView, MenuRecord, split_history
from hotel_staff.domain.notices import ActionResult
from hotel_staff.domain.responses import ApiResponse, MenuHistoryResponse
from hotel_staff.services.errors import (
    REQUEST_ERRORS,
    failure_message,
    response_message,
    status_code_from_exception,
)

_logger = logging.getLogger(__name__)

UPLOAD_FALLBACK = "Something went wrong. Please try again."
HISTORY_FALLBACK = "Could not load menu history."

_PERMISSION_MESSAGES = {
    "camera": "Please grant camera permissions to take menu photos.",
    "gallery": "Please grant camera roll permissions to upload menu photos.",
}


class ImageSource(Enum):
    """Where a menu photo comes from."""

    CAMERA = "camera"
    GALLERY = "gallery"


class UploadStatus(Enum):
    """Lifecycle of the pending menu upload."""

    IDLE = "idle"
    SELECTED = "selected"
    UPLOADING = "uploading"
    FAILED = "failed"


class ImagePickerError(RuntimeError):
    """Raised by pickers when an image cannot be captured or read."""


class ImagePicker(Protocol):
    """Device camera and gallery access."""

    async def request_permission(self, source: ImageSource) -> bool:
        """Ask for access to the source and return whether it was granted."""

    async def pick(
        self, source: ImageSource, multiple: bool = False
    ) -> list[LocalImage]:
        """Let the user pick images; an empty list means cancelled."""


@dataclass
class PendingUpload:
    """The photo and note being prepared for upload."""

    image: LocalImage | None = None
    note: str = ""
    status: UploadStatus = UploadStatus.IDLE
    error: str | None = None


@dataclass
class MenuPublisher:
    """Selects, uploads and displays the hotel's daily menu."""

    api_client: HotelApiClient
    image_picker: ImagePicker
    history_limit: int = 5
    note_max_length: int = 200
    pending: PendingUpload = field(default_factory=PendingUpload)
    history: MenuHistoryView = field(default_factory=MenuHistoryView)
    is_fetching_history: bool = False
    history_error: str | None = None
    _history_generation: int = field(default=0, repr=False)

    @property
    def status(self) -> UploadStatus:
        return self.pending.status

    @property
    def is_uploading(self) -> bool:
        return self.pending.status is UploadStatus.UPLOADING

    @property
    def can_publish(self) -> bool:
        return self.pending.image is not None and not self.is_uploading

    @property
    def current_menu(self) -> MenuRecord | None:
        return self.history.current

    @property
    def past_menus(self) -> list[MenuRecord]:
        return list(self.history.past)

    async def select_image(self, source: ImageSource) -> ActionResult:
        """Pick a photo from the camera or gallery."""
        if self.is_uploading:
            return ActionResult.info("Please wait", "An upload is in progress.")
        if not await self.image_picker.request_permission(source):
            self.pending = PendingUpload(note=self.pending.note)
            return ActionResult.info(
                "Permission needed", _PERMISSION_MESSAGES[source.value]
            )
        try:
            images = await self.image_picker.pick(source)
        except ImagePickerError as exc:
            _logger.warning("Image pick failed: %s", exc)
            return ActionResult.error("Error", "Could not load the selected image.")
        if not images:
            return ActionResult.quiet()
        self.pending.image = images[0]
        self.pending.status = UploadStatus.SELECTED
        self.pending.error = None
        return ActionResult.quiet()

    def set_note(self, text: str) -> str:
        """Update the note, truncated to the allowed length."""
        self.pending.note = text[: self.note_max_length]
        return self.pending.note

    def clear_selection(self) -> ActionResult:
        """Discard the pending upload."""
        if self.is_uploading:
            return ActionResult.info("Please wait", "An upload is in progress.")
        self.pending = PendingUpload()
        return ActionResult.quiet()

    async def publish(self) -> ActionResult:
        """Upload the selected photo and refresh the displayed history."""
        if self.is_uploading:
            return ActionResult.info("Please wait", "An upload is in progress.")
        image = self.pending.image
        if image is None:
            return ActionResult.invalid(
                "No image", "Please select or take a photo of today's menu first."
            )

        note = self.pending.note.strip() or None
        self.pending.status = UploadStatus.UPLOADING
        self.pending.error = None
        try:
            payload = await self.api_client.upload_menu(image, note=note)
            response = ApiResponse.model_validate(payload)
        except REQUEST_ERRORS as exc:
            _logger.warning(
                "Menu upload failed (status=%s): %s",
                status_code_from_exception(exc),
                exc,
            )
            return self._fail(failure_message(exc, UPLOAD_FALLBACK))
        except BaseException:
            self.pending.status = UploadStatus.FAILED
            raise

        if not response.success:
            _logger.warning("Menu upload rejected: %s", response.message)
            return self._fail(response_message(response, UPLOAD_FALLBACK))

        _logger.info("Menu uploaded: image=%s note=%s", image.name, note is not None)
        self.pending = PendingUpload()
        await self.reconcile()
        return ActionResult.success(
            "Success!",
            "Today's menu has been uploaded successfully! "
            "It will now appear on the website.",
        )

    async def reconcile(self) -> ActionResult:
        """Re-fetch history and recompute the current menu and past window."""
        self._history_generation += 1
        generation = self._history_generation
        self.is_fetching_history = True
        try:
            payload = await self.api_client.get_menu_history()
            response = MenuHistoryResponse.model_validate(payload)
        except REQUEST_ERRORS as exc:
            _logger.warning("Error fetching menu history: %s", exc)
            message = failure_message(exc, HISTORY_FALLBACK)
            if generation == self._history_generation:
                self.history_error = message
            return ActionResult.error("Error", message)
        finally:
            if generation == self._history_generation:
                self.is_fetching_history = False

        if generation != self._history_generation:
            # A newer reconcile owns the display.
            return ActionResult.quiet()
        if not response.success:
            message = response_message(response, HISTORY_FALLBACK)
            self.history_error = message
            return ActionResult.error("Error", message)

        records = _parse_menus(response.menus)
        self.history = split_history(records, self.history_limit)
        self.history_error = None
        return ActionResult.quiet()

    async def on_activate(self) -> ActionResult:
        """Refresh when the hosting screen becomes visible again."""
        return await self.reconcile()

    def _fail(self, message: str) -> ActionResult:
        self.pending.status = UploadStatus.FAILED
        self.pending.error = message
        return ActionResult.error("Upload Failed", message)


def _parse_menus(raw_menus: list[Any]) -> list[MenuRecord]:
    """Validate history entries one by one, skipping malformed records."""
    records: list[MenuRecord] = []
    for index, raw in enumerate(raw_menus):
        try:
            records.append(MenuRecord.model_validate(raw))
        except ValidationError as exc:
            _logger.warning(
                "Skipping malformed menu record at index %s: %s",
                index,
                exc.errors(include_url=False),
            )
    return records
