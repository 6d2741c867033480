from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import Callable

from django.conf import settings
from django.utils import timezone

OPEN_ENDED = datetime(2099, 1, 1, tzinfo=dt_timezone.utc)
PERIOD_CLOSED = "Nominations period closed"


def parse_deadline(raw):
    """
    Parse a "DD/MM/YYYY" deadline into midnight UTC of that day.

    An empty value means nominations never close.
    """
    if not raw:
        return OPEN_ENDED
    try:
        day, month, year = (int(part) for part in raw.split("/"))
        return datetime(year, month, day, tzinfo=dt_timezone.utc)
    except ValueError as exc:
        raise ValueError(
            f"NOMINATIONS_DEADLINE must be DD/MM/YYYY, got {raw!r}"
        ) from exc


@dataclass(frozen=True)
class Deadline:
    closes_at: datetime
    clock: Callable[[], datetime] = timezone.now

    def is_passed(self) -> bool:
        return self.clock() > self.closes_at


def get_deadline():
    return Deadline(closes_at=parse_deadline(settings.NOMINATIONS_DEADLINE))
