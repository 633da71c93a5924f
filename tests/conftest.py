"""Test fixtures."""

from collections.abc import Generator
import datetime

from freezegun import freeze_time
import pytest

FROZEN_TIME = "2024-03-04T05:06:07+00:00"
FROZEN_DATETIME = datetime.datetime(2024, 3, 4, 5, 6, 7, tzinfo=datetime.timezone.utc)


class FakeIdGenerator:
    """IdGenerator that returns predictable ids."""

    def __init__(self) -> None:
        self.count = 0

    def vcard_uid(self) -> str:
        self.count += 1
        return f"urn:uuid:00000000-0000-4000-8000-{self.count:012d}"

    def calendar_uid(self, domain: str) -> str:
        self.count += 1
        return f"uid-{self.count}@{domain}"


@pytest.fixture(autouse=True)
def frozen_time() -> Generator[None, None, None]:
    """Freeze the clock used for REV and DTSTAMP."""
    with freeze_time(FROZEN_TIME):
        yield


@pytest.fixture
def id_generator() -> FakeIdGenerator:
    """Fixture for predictable record ids."""
    return FakeIdGenerator()
