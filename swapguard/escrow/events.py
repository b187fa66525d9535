"""Notifications emitted by the sandwich guard."""

from dataclasses import asdict, dataclass
from typing import Union


@dataclass(frozen=True)
class SwapPaused:
    """A large trade was escrowed."""
    id: str
    owner: str
    amount_in: int
    valid_after: int
    valid_until: int


@dataclass(frozen=True)
class SwapExecuted:
    """A pending trade was settled."""
    id: str
    executor: str
    amount_out: int
    fee: int


@dataclass(frozen=True)
class SwapCancelled:
    """A pending trade was refunded to its owner."""
    id: str


GuardEvent = Union[SwapPaused, SwapExecuted, SwapCancelled]


def event_to_dict(event: GuardEvent) -> dict:
    return {"event": type(event).__name__, **asdict(event)}
