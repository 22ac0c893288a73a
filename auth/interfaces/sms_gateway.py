"""SMS gateway interface."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class SmsGateway(Protocol):
    """Messaging collaborator.

    Implementations raise ``SmsDeliveryError`` when a message cannot be
    handed off to the provider.
    """

    async def send(self, number: str, message: str) -> None:
        ...

    async def send_bulk(self, numbers: Sequence[str], message: str) -> int:
        ...
