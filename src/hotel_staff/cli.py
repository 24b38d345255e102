"""Command-line front end for hotel staff."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path

from hotel_staff.adapters.file_image_picker import FileImagePicker
from hotel_staff.app_logging import configure_logging
from hotel_staff.containers import AppContainer, build_container
from hotel_staff.domain.menus import MenuRecord
from hotel_staff.domain.notices import ActionResult
from hotel_staff.services.menus import ImageSource

Prompt = Callable[[str], str]
Handler = Callable[[argparse.Namespace, AppContainer, Prompt], Awaitable[int]]

_PUBLIC_COMMANDS = {
    "login",
    "request-otp",
    "verify-otp",
    "direct-login",
    "logout",
    "status",
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all commands."""
    parser = argparse.ArgumentParser(
        prog="hotel-staff", description="Publish your hotel's daily menu."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    login = commands.add_parser("login", help="Sign in with an OTP")
    _add_identity_arguments(login)

    request_otp = commands.add_parser("request-otp", help="Send an OTP")
    request_otp.add_argument("mobile_number")

    verify_otp = commands.add_parser("verify-otp", help="Verify an OTP")
    _add_identity_arguments(verify_otp)
    verify_otp.add_argument("code")

    direct_login = commands.add_parser("direct-login", help="Sign in without OTP")
    _add_identity_arguments(direct_login)

    commands.add_parser("logout", help="Sign out and forget the token")
    commands.add_parser("status", help="Show the session state")
    commands.add_parser("profile", help="Show the hotel profile")
    commands.add_parser("history", help="Show the current and recent menus")

    publish = commands.add_parser("publish", help="Upload today's menu photo")
    publish.add_argument("image", type=Path)
    publish.add_argument("--note", default="")

    add_photos = commands.add_parser("add-photos", help="Upload hotel photos")
    add_photos.add_argument("images", type=Path, nargs="+")

    delete_photo = commands.add_parser("delete-photo", help="Delete a hotel photo")
    delete_photo.add_argument("photo_url")
    return parser


def _add_identity_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("mobile_number")
    parser.add_argument("--name")
    parser.add_argument("--hotel-name")


def print_result(result: ActionResult) -> None:
    """Print the notice of a result, if any."""
    if result.notice is not None:
        print(f"{result.notice.title}: {result.notice.message}")


def _exit_code(result: ActionResult) -> int:
    print_result(result)
    return 0 if result.ok else 1


def _format_menu(menu: MenuRecord) -> str:
    line = f"{menu.date:%d %b %Y %H:%M}  {menu.image_url}"
    return f"{line}  {menu.note}" if menu.note else line


async def _login(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    if container.session_manager.is_authenticated:
        print("Already signed in. Run `hotel-staff logout` to switch accounts.")
        return 0
    sent = await container.auth_service.request_otp(args.mobile_number)
    print_result(sent)
    if not sent.ok:
        return 1
    verification = container.otp_verification(
        args.mobile_number, name=args.name, hotel_name=args.hotel_name
    )
    verification.open()
    try:
        while True:
            try:
                entry = await asyncio.to_thread(
                    prompt, "Enter OTP ('r' to resend, 'q' to quit): "
                )
            except EOFError:
                return 1
            entry = entry.strip().lower()
            if entry == "q":
                return 1
            if entry == "r":
                print_result(await verification.resend())
                continue
            verification.set_code(entry)
            result = await verification.verify()
            print_result(result)
            if result.ok or container.session_manager.is_authenticated:
                return 0
    finally:
        await verification.close()


async def _request_otp(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    return _exit_code(await container.auth_service.request_otp(args.mobile_number))


async def _verify_otp(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    result = await container.auth_service.verify_otp(
        args.mobile_number, args.code, name=args.name, hotel_name=args.hotel_name
    )
    return _exit_code(result)


async def _direct_login(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    result = await container.auth_service.direct_login(
        args.mobile_number, name=args.name, hotel_name=args.hotel_name
    )
    return _exit_code(result)


async def _logout(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    await container.session_manager.logout()
    print("Logged out.")
    return 0


async def _status(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    snapshot = container.session_manager.snapshot()
    print(f"Session: {snapshot.state.value}")
    print(f"Screens: {', '.join(snapshot.screens)}")
    return 0


async def _profile(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    service = container.profile_service
    result = await service.fetch_profile()
    if not result.ok or service.profile is None:
        return _exit_code(result)
    profile = service.profile
    print(profile.display_name)
    if profile.mobile_number:
        print(f"Mobile: {profile.mobile_number}")
    if profile.address:
        print(f"Address: {profile.address}")
    for photo in service.photos:
        print(f"Photo: {photo}")
    return 0


async def _history(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    publisher = container.menu_publisher
    result = await publisher.on_activate()
    if not result.ok:
        return _exit_code(result)
    if publisher.current_menu is None:
        print("No menus uploaded yet.")
        return 0
    print(f"Current: {_format_menu(publisher.current_menu)}")
    for menu in publisher.past_menus:
        print(f"Past:    {_format_menu(menu)}")
    return 0


async def _publish(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    publisher = container.menu_publisher
    selected = await publisher.select_image(ImageSource.GALLERY)
    if publisher.pending.image is None:
        print_result(selected)
        return 1
    publisher.set_note(args.note)
    result = await publisher.publish()
    if not result.ok:
        return _exit_code(result)
    print_result(result)
    if publisher.current_menu is not None:
        print(f"Current: {_format_menu(publisher.current_menu)}")
    return 0


async def _add_photos(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    return _exit_code(await container.profile_service.add_photos())


async def _delete_photo(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt
) -> int:
    return _exit_code(await container.profile_service.delete_photo(args.photo_url))


_HANDLERS: dict[str, Handler] = {
    "login": _login,
    "request-otp": _request_otp,
    "verify-otp": _verify_otp,
    "direct-login": _direct_login,
    "logout": _logout,
    "status": _status,
    "profile": _profile,
    "history": _history,
    "publish": _publish,
    "add-photos": _add_photos,
    "delete-photo": _delete_photo,
}


async def run_command(
    args: argparse.Namespace, container: AppContainer, prompt: Prompt = input
) -> int:
    """Initialize the session and dispatch a parsed command."""
    await container.session_manager.initialize()
    if (
        args.command not in _PUBLIC_COMMANDS
        and not container.session_manager.is_authenticated
    ):
        print("Not signed in. Run `hotel-staff login <mobile number>` first.")
        return 1
    return await _HANDLERS[args.command](args, container, prompt)


async def _run_and_close(args: argparse.Namespace, container: AppContainer) -> int:
    try:
        return await run_command(args, container)
    finally:
        await container.close_resources()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``hotel-staff`` command."""
    args = build_parser().parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    paths: list[Path] = []
    if args.command == "publish":
        paths = [args.image]
    elif args.command == "add-photos":
        paths = list(args.images)
    try:
        container = build_container(image_picker=FileImagePicker(paths))
    except ValueError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    return asyncio.run(_run_and_close(args, container))


if __name__ == "__main__":
    sys.exit(main())
