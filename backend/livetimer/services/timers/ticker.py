import threading
import time
from collections import namedtuple

from livetimer import db
from livetimer.models import Timer

TickResult = namedtuple('TickResult', ['advanced', 'failed', 'skipped'])


class Ticker:
    """Advances every active timer by one interval, then broadcasts.

    - Progress is tick-counted: each tick adds exactly ``interval_ms``,
      independent of how long the tick actually took
    - Each timer is updated and committed on its own; one failing row is
      logged and the rest still advance
    - Ticks never overlap: a tick requested while one is running is skipped
    """

    def __init__(self, app, channels, interval_ms: int = 1000):
        self.app = app
        self.channels = channels
        self.interval_ms = int(interval_ms)
        self._tick_lock = threading.Lock()
        self._running = False
        self._task = None

    @property
    def running(self) -> bool:
        return self._running

    def tick(self) -> TickResult:
        if not self._tick_lock.acquire(blocking=False):
            self.app.logger.warning("[tick-skip] previous tick still running")
            return TickResult(0, 0, True)
        try:
            with self.app.app_context():
                advanced, failed = self._advance_all()
                try:
                    self.channels.broadcast_all()
                except Exception:
                    self.app.logger.exception("[tick] broadcast failed")
                if failed:
                    self.app.logger.warning(f"[tick] advanced={advanced} failed={failed}")
                else:
                    self.app.logger.debug(f"[tick] advanced={advanced}")
                return TickResult(advanced, failed, False)
        finally:
            self._tick_lock.release()

    def _advance_all(self):
        try:
            timer_ids = [row.id for row in db.session.query(Timer.id).filter(Timer.is_active.is_(True)).all()]
        except Exception:
            db.session.rollback()
            self.app.logger.exception("[tick] could not load active timers")
            return 0, 0
        advanced = failed = 0
        for timer_id in timer_ids:
            try:
                if self._advance_one(timer_id):
                    advanced += 1
            except Exception:
                db.session.rollback()
                failed += 1
                self.app.logger.exception(f"[tick-failed] timer={timer_id}")
        return advanced, failed

    def _advance_one(self, timer_id: int) -> bool:
        # Increment in SQL so a stop committed mid-tick is never overwritten
        updated = (
            Timer.query
            .filter(Timer.id == timer_id, Timer.is_active.is_(True))
            .update({Timer.progress: Timer.progress + self.interval_ms}, synchronize_session=False)
        )
        db.session.commit()
        return updated > 0

    def run_forever(self) -> None:
        """Tick every interval until stop(); started through start()."""
        period = self.interval_ms / 1000.0
        self.app.logger.info(f"[ticker-start] interval={self.interval_ms}ms")
        while self._running:
            started = time.monotonic()
            try:
                self.tick()
            except Exception:
                self.app.logger.exception("[tick] iteration failed")
            elapsed = time.monotonic() - started
            self.channels.socketio.sleep(max(0.0, period - elapsed))
        self.app.logger.info("[ticker-stop]")

    def start(self):
        if self._task is not None and self._running:
            return self._task
        self._running = True
        self._task = self.channels.socketio.start_background_task(self.run_forever)
        return self._task

    def stop(self) -> None:
        self._running = False
