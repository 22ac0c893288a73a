"""Shared fakes for the auth tests."""

from unittest import mock

from auth.config import AuthConfig
from auth.exceptions import SmsDeliveryError


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSmsGateway:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def send(self, number, message):
        self.sent.append((number, message))

    async def send_bulk(self, numbers, message):
        for number in numbers:
            self.sent.append((number, message))
        return len(numbers)


class FailingSmsGateway:
    def __init__(self):
        self.calls = 0

    async def send(self, number, message):
        self.calls += 1
        raise SmsDeliveryError("gateway unavailable")

    async def send_bulk(self, numbers, message):
        raise SmsDeliveryError("gateway unavailable")


def codes(*values):
    """Code factory returning the given codes in order."""
    iterator = iter(values)
    return lambda: next(iterator)


def use_fast_hashing(test_case) -> None:
    """Drop bcrypt to its minimum cost for the duration of a test."""
    patcher = mock.patch.object(AuthConfig, "BCRYPT_ROUNDS", 4)
    patcher.start()
    test_case.addCleanup(patcher.stop)
