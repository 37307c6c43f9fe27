from __future__ import annotations

import asyncio
import contextlib
import contextvars
import logging
import time
from typing import Any, Awaitable, Callable, Iterator, Optional

from ..domain.constants import DEFAULT_REFRESH_RATIO, RefreshOutcome
from ..domain.entities import is_empty
from ..domain.exceptions import RefreshFailedError, TokenAuthError
from ..domain.value_objects import ScheduledRefresh

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[Optional[float], str], Awaitable[Any]]

# Epoch a timer-driven refresh was started under; unset outside that task
_refresh_epoch: contextvars.ContextVar[Optional[int]] = contextvars.ContextVar(
    "token_auth_refresh_epoch", default=None
)


class RefreshScheduler:
    """
    Expiry scheduler: keeps at most one refresh armed ahead of token expiry.

    - schedule() cancels whatever is pending before arming a new timer
    - the refresh fires after `refresh_ratio` of the TTL has elapsed
    - in inert mode the pending refresh is recorded but no timer is created
    - a failed timer-driven refresh stops the cycle; nothing is re-armed
    - stop() bumps an epoch so a refresh already in flight cannot re-arm
    """

    def __init__(
        self,
        *,
        refresh_access_tokens: bool = True,
        refresh_ratio: float = DEFAULT_REFRESH_RATIO,
        inert: bool = False,
        clock: Callable[[], float] = time.time,
        on_fire: Optional[RefreshCallback] = None,
    ) -> None:
        self.refresh_access_tokens = refresh_access_tokens
        self.refresh_ratio = refresh_ratio
        self.inert = inert
        self._clock = clock
        self._on_fire = on_fire

        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[ScheduledRefresh] = None
        self._task: Optional[asyncio.Task] = None
        self._epoch = 0
        self.last_outcome: Optional[RefreshOutcome] = None

    def bind(self, on_fire: RefreshCallback) -> None:
        self._on_fire = on_fire

    # ------------------------------------------------------------------ #
    # state
    # ------------------------------------------------------------------ #

    @property
    def pending(self) -> Optional[ScheduledRefresh]:
        return self._pending

    @property
    def armed(self) -> bool:
        return self._pending is not None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def superseded(self) -> bool:
        """True inside a guarded refresh that was stopped while in flight."""
        epoch = _refresh_epoch.get()
        return epoch is not None and epoch != self._epoch

    @contextlib.contextmanager
    def guard(self) -> Iterator[None]:
        """
        Pin the current epoch for the enclosed refresh.

        If stop() runs before the block ends, schedule() refuses to re-arm
        and `superseded` turns true.
        """
        reset = _refresh_epoch.set(self._epoch)
        try:
            yield
        finally:
            _refresh_epoch.reset(reset)

    def now_ms(self) -> int:
        return int(self._clock() * 1000)

    # ------------------------------------------------------------------ #
    # arming
    # ------------------------------------------------------------------ #

    def schedule(
        self,
        expires_in: Optional[float],
        expires_at: Optional[int],
        token: Optional[str],
    ) -> Optional[ScheduledRefresh]:
        """
        Arm the refresh for a token.

        `expires_in` is seconds, `expires_at` epoch milliseconds. When only
        `expires_in` is given the absolute expiry is computed from now.
        Returns the armed refresh, or None when nothing was scheduled.
        """
        if not self.refresh_access_tokens:
            return None
        if self.superseded:
            logger.debug("Refresh finished after the session was stopped, not re-arming")
            return None

        now = self.now_ms()
        if expires_at is None and expires_in is not None:
            expires_at = now + int(expires_in * 1000)

        if is_empty(token) or expires_at is None or expires_at <= now:
            logger.debug("Refresh not scheduled (token=%s, expires_at=%s)", bool(token), expires_at)
            return None

        if expires_in is None:
            expires_in = (expires_at - now) / 1000

        wait_ms = max(round(round(expires_in) * 1000 * self.refresh_ratio), 0)

        self.cancel()
        self._pending = ScheduledRefresh(
            wait_ms=wait_ms,
            expires_in=expires_in,
            expires_at=expires_at,
            token=token,
        )
        if not self.inert:
            loop = asyncio.get_running_loop()
            self._handle = loop.call_later(self._pending.wait_seconds, self._fire, self._pending)

        logger.debug("Token refresh scheduled in %d ms", wait_ms)
        return self._pending

    def cancel(self) -> None:
        """Drop the pending timer, if any. In-flight requests are left alone."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = None

    def stop(self) -> None:
        """Cancel, and keep an in-flight refresh from re-arming."""
        self._epoch += 1
        self.cancel()

    async def aclose(self) -> None:
        self.stop()
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    # ------------------------------------------------------------------ #
    # firing
    # ------------------------------------------------------------------ #

    def _fire(self, scheduled: ScheduledRefresh) -> None:
        self._handle = None
        self._pending = None
        if self._on_fire is None:
            logger.warning("Refresh timer fired with no refresh callback bound")
            return
        self._task = asyncio.get_running_loop().create_task(self._run(scheduled, self._epoch))

    async def _run(self, scheduled: ScheduledRefresh, epoch: int) -> None:
        _refresh_epoch.set(epoch)
        try:
            await self._on_fire(scheduled.expires_in, scheduled.token)
        except RefreshFailedError:
            # already logged at warning level; the session goes stale at expiry
            self.last_outcome = RefreshOutcome.FAILED
            return
        except TokenAuthError as exc:
            logger.warning("Scheduled token refresh aborted: %s", exc)
            self.last_outcome = RefreshOutcome.FAILED
            return
        except Exception:  # noqa: BLE001
            logger.warning("Scheduled token refresh crashed", exc_info=True)
            self.last_outcome = RefreshOutcome.FAILED
            return

        if self.superseded:
            self.last_outcome = RefreshOutcome.CANCELLED
        else:
            self.last_outcome = RefreshOutcome.REFRESHED
