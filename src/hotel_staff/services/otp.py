"""OTP entry state and the resend countdown."""

import asyncio
import contextlib
from dataclasses import dataclass, field

from hotel_staff.domain.notices import ActionResult
from hotel_staff.services.auth import AuthService


@dataclass
class ResendCountdown:
    """Countdown gating OTP resends. Expiry only permits a resend."""

    duration_seconds: int = 300
    interval_seconds: float = 1.0
    remaining: int = field(init=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.remaining = self.duration_seconds

    @property
    def can_resend(self) -> bool:
        return self.remaining <= 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def tick(self) -> int:
        """Advance the countdown by one interval."""
        if self.remaining > 0:
            self.remaining -= 1
        return self.remaining

    def formatted(self) -> str:
        """Render the remaining time as MM:SS."""
        minutes, seconds = divmod(max(self.remaining, 0), 60)
        return f"{minutes % 60:02d}:{seconds:02d}"

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def restart(self) -> None:
        """Reset to the full duration and keep ticking."""
        self.remaining = self.duration_seconds
        self.start()

    async def cancel(self) -> None:
        """Stop ticking; safe to call more than once."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while self.remaining > 0:
            await asyncio.sleep(self.interval_seconds)
            self.tick()


@dataclass
class OtpVerification:
    """State of the OTP screen for one mobile number."""

    auth_service: AuthService
    mobile_number: str
    countdown: ResendCountdown
    name: str | None = None
    hotel_name: str | None = None
    incoming_otp: str | None = None
    digits: list[str] = field(init=False)

    def __post_init__(self) -> None:
        length = self.auth_service.otp_length
        prefill = list((self.incoming_otp or "")[:length])
        self.digits = prefill + [""] * (length - len(prefill))

    @property
    def code(self) -> str:
        return "".join(self.digits)

    @property
    def is_loading(self) -> bool:
        return self.auth_service.is_loading

    def open(self) -> None:
        """Start the resend countdown when the screen is shown."""
        self.countdown.start()

    def set_digit(self, index: int, value: str) -> int | None:
        """Set one digit and return the index to focus next, if any."""
        if not 0 <= index < len(self.digits):
            raise IndexError(f"OTP digit index out of range: {index}")
        self.digits[index] = value[-1:] if value else ""
        if value and index < len(self.digits) - 1:
            return index + 1
        return None

    def set_code(self, code: str) -> None:
        """Fill digits from a pasted code."""
        length = len(self.digits)
        chars = list(code.strip()[:length])
        self.digits = chars + [""] * (length - len(chars))

    async def verify(self) -> ActionResult:
        """Verify the entered code; success logs the session in."""
        return await self.auth_service.verify_otp(
            self.mobile_number,
            self.code,
            name=self.name,
            hotel_name=self.hotel_name,
        )

    async def resend(self) -> ActionResult:
        """Request a new OTP once the countdown has expired."""
        if not self.countdown.can_resend:
            return ActionResult.info(
                "Please wait",
                f"You can resend the OTP in {self.countdown.formatted()}.",
            )
        self.countdown.restart()
        result = await self.auth_service.request_otp(self.mobile_number)
        if result.ok:
            return ActionResult.success(
                "OTP Sent", "A new OTP has been sent to your mobile number."
            )
        return ActionResult.error("Error", "Failed to resend OTP")

    async def close(self) -> None:
        """Tear down the screen, stopping the countdown."""
        await self.countdown.cancel()
