"""Simulation clock: real-time tracking and fast-forward/reverse playback."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

# Simulated seconds per real second
PLAYBACK_SPEEDS = (-3600, -600, -60, -10, -1, 0, 1, 10, 60, 600, 3600)

_SPEED_LABELS = {
    -3600: "-1h/s",
    -600: "-10m/s",
    -60: "-1m/s",
    -10: "-10s/s",
    -1: "-1s/s",
    0: "PAUSED",
    1: "1s/s",
    10: "10s/s",
    60: "1m/s",
    600: "10m/s",
    3600: "1h/s",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PlaybackClock:
    """The instant the sky is shown for.

    In realtime mode the instant follows the wall clock. Otherwise it moves by
    ``speed`` simulated seconds per elapsed real second. The wall clock is
    always passed in by the caller so ticks stay deterministic in tests.
    """

    instant: datetime = field(default_factory=_utcnow)
    speed: int = 1
    realtime: bool = True

    def tick(self, elapsed_seconds: float, wall_clock: datetime | None = None) -> datetime:
        """Advance by one frame and return the new instant."""
        if self.realtime:
            self.instant = wall_clock if wall_clock is not None else _utcnow()
        elif self.speed:
            self.instant += timedelta(seconds=elapsed_seconds * self.speed)
        return self.instant

    def set_instant(self, instant: datetime) -> None:
        """Jump to a chosen time; leaves realtime mode."""
        self.instant = instant
        self.realtime = False

    def forward(self) -> None:
        """Flip reverse to forward at the same rate, start from pause, or speed up."""
        self.realtime = False
        if self.speed < 0:
            self.speed = -self.speed
        elif self.speed == 0:
            self.speed = 1
        else:
            idx = PLAYBACK_SPEEDS.index(self.speed) if self.speed in PLAYBACK_SPEEDS else -1
            if 0 <= idx < len(PLAYBACK_SPEEDS) - 1:
                self.speed = PLAYBACK_SPEEDS[idx + 1]

    def reverse(self) -> None:
        """Mirror of forward()."""
        self.realtime = False
        if self.speed > 0:
            self.speed = -self.speed
        elif self.speed == 0:
            self.speed = -1
        else:
            idx = PLAYBACK_SPEEDS.index(self.speed) if self.speed in PLAYBACK_SPEEDS else -1
            if idx > 0:
                self.speed = PLAYBACK_SPEEDS[idx - 1]

    def pause(self) -> None:
        self.realtime = False
        self.speed = 0

    @property
    def speed_label(self) -> str:
        return _SPEED_LABELS.get(self.speed, f"{self.speed}x")
