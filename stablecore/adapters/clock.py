from datetime import UTC, date, datetime


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def today(self) -> date:
        # Calendar dates follow the device's local midnight.
        return datetime.now().date()
