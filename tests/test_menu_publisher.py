"""Tests for daily menu publishing and history reconciliation."""

import asyncio

import httpx

from hotel_staff.domain.notices import NoticeKind
from hotel_staff.services.menus import ImageSource, MenuPublisher, UploadStatus
from tests.conftest import FakeHotelApiClient, FakeImagePicker

HISTORY = {
    "success": True,
    "menus": [
        {"id": 1, "imageUrl": "https://cdn.test/1.jpg", "date": "2024-01-02"},
        {"id": 2, "imageUrl": "https://cdn.test/2.jpg", "date": "2024-01-01"},
    ],
}


def _server_error() -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.test/menu/upload")
    response = httpx.Response(
        500, json={"message": "Storage unavailable"}, request=request
    )
    return httpx.HTTPStatusError("500", request=request, response=response)


def _publisher(
    api_client: FakeHotelApiClient, picker: FakeImagePicker | None = None
) -> MenuPublisher:
    return MenuPublisher(
        api_client=api_client, image_picker=picker or FakeImagePicker()
    )


def test_publish_without_image_is_rejected_locally() -> None:
    api_client = FakeHotelApiClient()
    publisher = _publisher(api_client)

    result = asyncio.run(publisher.publish())

    assert result.ok is False
    assert result.notice.kind is NoticeKind.VALIDATION
    assert api_client.calls == []
    assert publisher.status is UploadStatus.IDLE


def test_select_image_moves_to_selected() -> None:
    picker = FakeImagePicker()
    publisher = _publisher(FakeHotelApiClient(), picker)

    asyncio.run(publisher.select_image(ImageSource.CAMERA))

    assert publisher.status is UploadStatus.SELECTED
    assert publisher.pending.image.name == "menu.jpg"
    assert publisher.pending.image.mime_type == "image/jpeg"
    assert picker.permission_requests == [ImageSource.CAMERA]
    assert publisher.can_publish is True


def test_permission_denial_discards_selection_without_picking() -> None:
    picker = FakeImagePicker()
    publisher = _publisher(FakeHotelApiClient(), picker)
    asyncio.run(publisher.select_image(ImageSource.GALLERY))
    picker.granted = False

    result = asyncio.run(publisher.select_image(ImageSource.CAMERA))

    assert result.notice.kind is NoticeKind.INFO
    assert "camera permissions" in result.notice.message
    assert publisher.status is UploadStatus.IDLE
    assert publisher.pending.image is None
    assert picker.picks == 1


def test_cancelled_pick_keeps_state() -> None:
    picker = FakeImagePicker(images=[])
    publisher = _publisher(FakeHotelApiClient(), picker)

    result = asyncio.run(publisher.select_image(ImageSource.GALLERY))

    assert result.ok is True
    assert result.notice is None
    assert publisher.status is UploadStatus.IDLE


def test_set_note_is_truncated() -> None:
    publisher = _publisher(FakeHotelApiClient())

    note = publisher.set_note("x" * 250)

    assert len(note) == 200


def test_publish_success_clears_pending_and_reconciles() -> None:
    api_client = FakeHotelApiClient()
    api_client.queue("get_menu_history", HISTORY)
    publisher = _publisher(api_client)
    asyncio.run(publisher.select_image(ImageSource.GALLERY))
    publisher.set_note("  Paneer Thali  ")

    result = asyncio.run(publisher.publish())

    assert result.ok is True
    assert result.notice.kind is NoticeKind.SUCCESS
    upload = api_client.calls_to("upload_menu")[0]
    assert upload["note"] == "Paneer Thali"
    assert upload["image"].name == "menu.jpg"
    assert publisher.status is UploadStatus.IDLE
    assert publisher.pending.image is None
    assert publisher.pending.note == ""
    assert publisher.current_menu.id == 1
    assert [name for name, _ in api_client.calls] == ["upload_menu", "get_menu_history"]


def test_publish_omits_blank_note() -> None:
    api_client = FakeHotelApiClient()
    publisher = _publisher(api_client)
    asyncio.run(publisher.select_image(ImageSource.GALLERY))
    publisher.set_note("   ")

    asyncio.run(publisher.publish())

    assert api_client.calls_to("upload_menu")[0]["note"] is None


def test_server_error_retains_image_and_retry_needs_no_reselection() -> None:
    api_client = FakeHotelApiClient()
    api_client.queue("upload_menu", _server_error(), {"success": True})
    picker = FakeImagePicker()
    publisher = _publisher(api_client, picker)
    asyncio.run(publisher.select_image(ImageSource.GALLERY))
    image = publisher.pending.image

    failed = asyncio.run(publisher.publish())

    assert failed.ok is False
    assert failed.notice.message == "Storage unavailable"
    assert publisher.status is UploadStatus.FAILED
    assert publisher.pending.image is image
    assert publisher.pending.error == "Storage unavailable"

    retried = asyncio.run(publisher.publish())

    assert retried.ok is True
    assert picker.picks == 1
    assert len(api_client.calls_to("upload_menu")) == 2
    assert api_client.calls_to("upload_menu")[1]["image"] is image


def test_unsuccessful_body_uses_generic_message() -> None:
    api_client = FakeHotelApiClient()
    api_client.queue("upload_menu", {"success": False})
    publisher = _publisher(api_client)
    asyncio.run(publisher.select_image(ImageSource.GALLERY))

    result = asyncio.run(publisher.publish())

    assert result.notice.message == "Something went wrong. Please try again."
    assert publisher.status is UploadStatus.FAILED


def test_network_error_uses_generic_message() -> None:
    api_client = FakeHotelApiClient()
    api_client.queue("upload_menu", httpx.ReadTimeout("slow"))
    publisher = _publisher(api_client)
    asyncio.run(publisher.select_image(ImageSource.GALLERY))

    result = asyncio.run(publisher.publish())

    assert result.notice.message == "Something went wrong. Please try again."
    assert publisher.pending.image is not None


def test_duplicate_publish_while_uploading_is_rejected() -> None:
    class SlowApiClient(FakeHotelApiClient):
        gate: asyncio.Event | None = None

        async def upload_menu(self, image, note=None):
            self.calls.append(("upload_menu", {"image": image, "note": note}))
            await self.gate.wait()
            return {"success": True}

    async def scenario():
        api_client = SlowApiClient()
        api_client.gate = asyncio.Event()
        publisher = _publisher(api_client)
        await publisher.select_image(ImageSource.GALLERY)
        first = asyncio.create_task(publisher.publish())
        await asyncio.sleep(0)
        assert publisher.is_uploading is True
        assert publisher.can_publish is False
        second = await publisher.publish()
        reselect = await publisher.select_image(ImageSource.CAMERA)
        api_client.gate.set()
        first_result = await first
        return api_client, second, reselect, first_result

    api_client, second, reselect, first_result = asyncio.run(scenario())

    assert second.ok is False
    assert reselect.ok is False
    assert first_result.ok is True
    assert len(api_client.calls_to("upload_menu")) == 1


def test_clear_selection_discards_pending() -> None:
    publisher = _publisher(FakeHotelApiClient())
    asyncio.run(publisher.select_image(ImageSource.GALLERY))
    publisher.set_note("Dal Bati")

    publisher.clear_selection()

    assert publisher.pending.image is None
    assert publisher.pending.note == ""
    assert publisher.status is UploadStatus.IDLE


def test_reconcile_splits_current_and_past() -> None:
    api_client = FakeHotelApiClient()
    api_client.queue("get_menu_history", HISTORY)
    publisher = _publisher(api_client)

    result = asyncio.run(publisher.reconcile())

    assert result.ok is True
    assert publisher.current_menu.id == 1
    assert [menu.id for menu in publisher.past_menus] == [2]
    assert publisher.is_fetching_history is False


def test_reconcile_on_empty_history_clears_current() -> None:
    api_client = FakeHotelApiClient()
    api_client.queue("get_menu_history", HISTORY, {"success": True, "menus": []})
    publisher = _publisher(api_client)
    asyncio.run(publisher.reconcile())
    assert publisher.current_menu is not None

    asyncio.run(publisher.on_activate())

    assert publisher.current_menu is None
    assert publisher.past_menus == []
    assert publisher.history.is_empty is True


def test_reconcile_skips_malformed_records(caplog) -> None:
    api_client = FakeHotelApiClient()
    api_client.queue(
        "get_menu_history",
        HISTORY,
        {
            "success": True,
            "menus": [
                {"id": 3, "date": "2024-01-03"},
                {"_id": 4, "date": None},
                {"imageUrl": "https://cdn.test/5.jpg", "date": "2024-01-01"},
                "garbage",
            ],
        },
    )
    publisher = _publisher(api_client)
    asyncio.run(publisher.reconcile())
    assert publisher.current_menu.id == 1

    result = asyncio.run(publisher.on_activate())

    assert result.ok is True
    assert publisher.current_menu.id == 3
    assert [menu.image_url for menu in publisher.past_menus] == [
        "https://cdn.test/5.jpg"
    ]
    assert publisher.history_error is None
    assert "Skipping malformed menu record at index 1" in caplog.text


def test_reconcile_failure_keeps_display_and_resets_flag() -> None:
    api_client = FakeHotelApiClient()
    api_client.queue("get_menu_history", HISTORY, httpx.ConnectError("offline"))
    publisher = _publisher(api_client)
    asyncio.run(publisher.reconcile())

    result = asyncio.run(publisher.reconcile())

    assert result.ok is False
    assert publisher.current_menu.id == 1
    assert publisher.history_error == "Could not load menu history."
    assert publisher.is_fetching_history is False


def test_on_activate_always_refetches() -> None:
    api_client = FakeHotelApiClient()
    api_client.queue("get_menu_history", HISTORY)
    publisher = _publisher(api_client)

    asyncio.run(publisher.on_activate())
    asyncio.run(publisher.on_activate())
    asyncio.run(publisher.on_activate())

    assert len(api_client.calls_to("get_menu_history")) == 3


def test_stale_reconcile_does_not_overwrite_newer_result() -> None:
    class OrderedApiClient(FakeHotelApiClient):
        gates: list[asyncio.Event] | None = None
        payloads: list[dict[str, object]] | None = None

        async def get_menu_history(self):
            index = len(self.calls_to("get_menu_history"))
            self.calls.append(("get_menu_history", {}))
            await self.gates[index].wait()
            return self.payloads[index]

    async def scenario():
        api_client = OrderedApiClient()
        api_client.gates = [asyncio.Event(), asyncio.Event()]
        api_client.payloads = [{"success": True, "menus": []}, HISTORY]
        publisher = _publisher(api_client)
        older = asyncio.create_task(publisher.reconcile())
        await asyncio.sleep(0)
        newer = asyncio.create_task(publisher.reconcile())
        await asyncio.sleep(0)
        api_client.gates[1].set()
        await newer
        api_client.gates[0].set()
        await older
        return publisher

    publisher = asyncio.run(scenario())

    assert publisher.current_menu.id == 1
    assert publisher.is_fetching_history is False
