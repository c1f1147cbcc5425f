from datetime import datetime, timedelta, timezone
import itertools
import pytest


@pytest.fixture
def clock():
    """A clock that advances one minute every time it is read, starting at 2020-01-01 UTC."""
    start = datetime(2020, 1, 1, tzinfo=timezone.utc)
    ticks = (start + timedelta(minutes=i) for i in itertools.count())
    return lambda: next(ticks)
