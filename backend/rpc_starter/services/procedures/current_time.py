"""Get Current Time — server clock as a UTC ISO-8601 instant plus the server zone name."""

from collections.abc import Callable
from datetime import datetime, timezone
from functools import partial

from rpc_starter.core.procedure import Procedure, define_procedure
from rpc_starter.core.result import HandlerResult, success
from rpc_starter.schemas.procedures import CurrentTime


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_instant(moment: datetime) -> str:
    """UTC, millisecond precision, "Z" suffix: 2024-01-31T09:15:02.123Z."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def get_current_time(
    zone: str = "UTC", clock: Callable[[], datetime] = utc_now,
) -> HandlerResult[CurrentTime]:
    return success(CurrentTime(timestamp=format_instant(clock()), timezone=zone))


def define(zone: str = "UTC", clock: Callable[[], datetime] = utc_now) -> Procedure:
    return define_procedure(
        "getCurrentTime", partial(get_current_time, zone=zone, clock=clock),
        output=CurrentTime,
        method="GET", path="/time",
        summary="Current server time",
    )
