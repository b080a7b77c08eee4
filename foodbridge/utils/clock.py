import time

HOUR_MS = 60 * 60 * 1000
MINUTE_MS = 60 * 1000


def now_ms() -> int:
	return int(time.time() * 1000)


def minutes_from_now_ms(minutes: float) -> int:
	return now_ms() + int(minutes * MINUTE_MS)
