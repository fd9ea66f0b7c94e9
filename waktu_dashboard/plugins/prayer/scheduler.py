"""
Azan trigger state machine.

Driven by a 1 Hz tick. When the current minute equals a prayer's minute the
scheduler starts the azan and the splashscreen, and holds a single-key lock so
the same prayer cannot fire twice. When playback completes (normally, by
error, or by stop) the splash is hidden after a short delay, the next prayer is
advanced in sequence and the lock is released.

Player completions arrive on the player's thread and are handed to `dispatch`,
which lets a UI owner run them on its own event loop.
"""
import logging
import threading
import time
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol
from zoneinfo import ZoneInfo

from waktu_dashboard.core.config import DEFAULT_TIMEZONE
from .prayer_set import PRAYER_KEYS, PrayerSet
from .resolver import NextPrayer, get_next_prayer, get_next_prayer_after


class SchedulerState(Enum):
    IDLE = "idle"
    TRIGGERED = "triggered"


class Splash(Protocol):
    def show(self, prayer_key: str) -> None: ...

    def hide(self) -> None: ...


def call_now(callback: Callable[[], None]) -> None:
    callback()


def thread_call_later(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class AzanScheduler:
    def __init__(
        self,
        player: Any,
        splash: Optional[Splash] = None,
        call_later: Callable[[float, Callable[[], None]], Any] = thread_call_later,
        dispatch: Callable[[Callable[[], None]], None] = call_now,
        clock: Callable[[], float] = time.time,
        tz: Optional[ZoneInfo] = None,
        hide_delay: float = 1.0,
        enabled: bool = True,
    ):
        self.player = player
        self.splash = splash
        self.call_later = call_later
        self.dispatch = dispatch
        self.clock = clock
        self.tz = tz or ZoneInfo(DEFAULT_TIMEZONE)
        self.hide_delay = hide_delay
        self.enabled = enabled
        self.logger = logging.getLogger(self.__class__.__name__)

        self.prayer_set: Optional[PrayerSet] = None
        self.next_prayer: Optional[NextPrayer] = None
        self.triggered_key: Optional[str] = None
        self.state = SchedulerState.IDLE

        self._lock = threading.RLock()
        self._session = None
        self._token: Optional[object] = None
        self._active_key: Optional[str] = None
        self._active_minute: Optional[int] = None
        self._auto_advance = True
        self._completed: Optional[tuple] = None  # (key, minute) of the last auto azan
        self._pending = None
        self._last_date: Optional[date] = None
        self._next_prayer_listeners: List[Callable[[NextPrayer], None]] = []
        self._day_change_listeners: List[Callable[[date], None]] = []

    def add_next_prayer_listener(self, callback: Callable[[NextPrayer], None]) -> None:
        self._next_prayer_listeners.append(callback)

    def add_day_change_listener(self, callback: Callable[[date], None]) -> None:
        self._day_change_listeners.append(callback)

    def _now(self, now: Optional[float]) -> int:
        return int(self.clock() if now is None else now)

    def local_date(self, now: int) -> date:
        return datetime.fromtimestamp(now, self.tz).date()

    def load_prayer_set(self, prayer_set: PrayerSet, now: Optional[float] = None) -> NextPrayer:
        """Replace the day's prayer times (new day or zone change) and publish the next prayer."""
        now = self._now(now)
        with self._lock:
            # A refresh of the same zone and day keeps today's trigger guards
            if self._table_key(self.prayer_set) != self._table_key(prayer_set):
                self.triggered_key = None
                self._completed = None
            self.prayer_set = prayer_set
            self.next_prayer = get_next_prayer(prayer_set, now)
            self.logger.info(f"Loaded prayer times for {prayer_set.zone}; next is {self.next_prayer}")
            self._publish(self.next_prayer)
            return self.next_prayer

    def _table_key(self, prayer_set: Optional[PrayerSet]) -> Optional[tuple]:
        if prayer_set is None:
            return None
        return prayer_set.zone, self.local_date(prayer_set.fajr)

    def clear(self) -> None:
        """Forget the loaded prayer times (zone switch) so nothing fires until new times load."""
        with self._lock:
            self.prayer_set = None
            self.next_prayer = None
            self.triggered_key = None
            self._completed = None

    def tick(self, now: Optional[float] = None) -> Optional[str]:
        """Check for a prayer starting this minute. Returns the key that fired, if any."""
        now = self._now(now)
        new_day = None
        fired = None
        with self._lock:
            today = self.local_date(now)
            if self._last_date is not None and today != self._last_date:
                self.logger.info(f"New day {today}; clearing azan lock")
                self.triggered_key = None
                self._completed = None
                new_day = today
            self._last_date = today

            # A test preview never holds back a real prayer; _fire replaces it
            previewing = self.state is SchedulerState.TRIGGERED and not self._auto_advance
            if self.prayer_set is not None and self.enabled and (self.state is SchedulerState.IDLE or previewing):
                minute = now // 60
                for key, timestamp in self.prayer_set.entries():
                    if timestamp // 60 != minute:
                        continue
                    if key == self.triggered_key or self._completed == (key, minute):
                        continue
                    self.triggered_key = key
                    self._fire(key, minute, auto_advance=True)
                    fired = key
                    break

        if new_day is not None:
            for callback in self._day_change_listeners:
                try:
                    callback(new_day)
                except Exception as e:
                    self.logger.error(f"Day change listener failed: {e}", exc_info=True)
        return fired

    def test_trigger(self, key: str, now: Optional[float] = None) -> None:
        """Preview the azan for any prayer. Clears the lock first and never advances the next prayer."""
        if key not in PRAYER_KEYS:
            raise ValueError(f"Unknown prayer: {key}")
        now = self._now(now)
        with self._lock:
            self.triggered_key = None
            self._fire(key, now // 60, auto_advance=False)

    def _fire(self, key: str, minute: int, auto_advance: bool) -> None:
        self.logger.info(f"Azan for {key} ({'automatic' if auto_advance else 'test'})")
        self._cancel_pending()
        if not auto_advance and self.state is SchedulerState.TRIGGERED and self._auto_advance:
            self._complete_auto(self._active_key, self._active_minute)
        previous, self._session, self._token = self._session, None, None
        if previous is not None:
            self.player.stop(previous)

        token = object()
        self._token = token
        self._active_key = key
        self._active_minute = minute
        self._auto_advance = auto_advance
        self.state = SchedulerState.TRIGGERED

        if self.splash is not None:
            try:
                self.splash.show(key)
            except Exception as e:
                self.logger.error(f"Could not show splashscreen: {e}", exc_info=True)

        session = self.player.play(key, lambda: self.dispatch(lambda: self._on_playback_complete(token)))
        if self._token is token:
            self._session = session

    def _on_playback_complete(self, token: object) -> None:
        with self._lock:
            if token is not self._token:
                self.logger.debug("Ignoring completion of a replaced azan session")
                return
            self._session = None

        # call_later may block until another thread services it; never hold the lock here
        pending = self.call_later(self.hide_delay, lambda: self._finish(token))
        with self._lock:
            if token is self._token:
                self._pending = pending
                return
        # Replaced while scheduling; _finish would ignore it anyway
        cancel = getattr(pending, "cancel", None)
        if callable(cancel):
            cancel()

    def _finish(self, token: object) -> None:
        with self._lock:
            if token is not self._token:
                return
            key = self._active_key
            minute = self._active_minute
            auto_advance = self._auto_advance
            self._token = None
            self._pending = None
            self._active_key = None
            self._active_minute = None
            self.state = SchedulerState.IDLE

            if self.splash is not None:
                try:
                    self.splash.hide()
                except Exception as e:
                    self.logger.error(f"Could not hide splashscreen: {e}", exc_info=True)

            if not auto_advance:
                self.logger.info(f"Test azan for {key} finished")
                return
            self._complete_auto(key, minute)

    def _complete_auto(self, key: str, minute: int) -> None:
        """Record an automatic azan as done and advance past it."""
        self._completed = (key, minute)
        self.triggered_key = None
        if self.prayer_set is not None:
            self.next_prayer = get_next_prayer_after(self.prayer_set, key, self._now(None))
            self.logger.info(f"Azan for {key} finished; advanced to {self.next_prayer}")
            self._publish(self.next_prayer)

    def _publish(self, next_prayer: NextPrayer) -> None:
        for callback in self._next_prayer_listeners:
            try:
                callback(next_prayer)
            except Exception as e:
                self.logger.error(f"Next prayer listener failed: {e}", exc_info=True)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            cancel = getattr(self._pending, "cancel", None)
            if callable(cancel):
                cancel()
            self._pending = None

    def stop(self) -> None:
        """Stop the playing azan; the normal completion path follows."""
        with self._lock:
            if self._session is not None:
                self.player.stop(self._session)

    def shutdown(self) -> None:
        """Teardown: drop any pending step and silence playback without advancing."""
        with self._lock:
            self._cancel_pending()
            session, self._session, self._token = self._session, None, None
            if session is not None:
                self.player.stop(session)
            if self.state is SchedulerState.TRIGGERED and self.splash is not None:
                self.splash.hide()
            self.state = SchedulerState.IDLE
            self._active_key = None

    def status(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "state": self.state.value,
                "zone": self.prayer_set.zone if self.prayer_set else None,
                "triggered_key": self.triggered_key,
                "active_key": self._active_key,
                "next_prayer": self.next_prayer.as_dict() if self.next_prayer else None,
                "enabled": self.enabled,
            }
