"""Domain models for published daily menus."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from pydantic import AliasChoices, BaseModel, Field


class MenuRecord(BaseModel):
    """A menu published on the server."""

    id: int | str | None = Field(
        default=None, validation_alias=AliasChoices("id", "_id")
    )
    image_url: str = Field(
        default="", validation_alias=AliasChoices("imageUrl", "image_url")
    )
    note: str | None = None
    date: datetime


@dataclass(frozen=True)
class MenuHistoryView:
    """The current menu plus a bounded window of past menus."""

    current: MenuRecord | None = None
    past: list[MenuRecord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.current is None


def split_history(records: list[MenuRecord], limit: int) -> MenuHistoryView:
    """Order records newest-first and split off the current menu."""
    if not records:
        return MenuHistoryView()
    ordered = sorted(records, key=_sort_key, reverse=True)
    window = max(limit - 1, 0)
    return MenuHistoryView(current=ordered[0], past=ordered[1 : 1 + window])


def _sort_key(record: MenuRecord) -> datetime:
    """Compare naive server dates as UTC."""
    if record.date.tzinfo is None:
        return record.date.replace(tzinfo=UTC)
    return record.date
