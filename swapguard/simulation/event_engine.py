"""
Event-Driven Scenario Engine.

Replays swap requests, executions and cancellations in chronological
order against a simulated pool.

Event types:
- swap: Exact-input swap request from a trader
- execute: Execution attempt on a paused trade
- cancel: Owner cancellation attempt
"""

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, Optional

import pandas as pd

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of scenario events."""
    EXECUTE = "execute"
    CANCEL = "cancel"
    SWAP = "swap"


@dataclass(order=True)
class Event:
    """
    Single event in the scenario timeline.

    Events are ordered by timestamp, then by priority (lower = earlier),
    then by insertion order.
    """
    timestamp: int
    priority: int = field(compare=True, default=0)
    sequence: int = field(compare=True, default=0)
    event_type: EventType = field(compare=False, default=EventType.SWAP)
    data: Any = field(compare=False, default=None)
    account: str = field(compare=False, default="")

    def __post_init__(self):
        # Settlement of earlier requests lands before new requests in the same second
        type_priorities = {
            EventType.EXECUTE: 1,
            EventType.CANCEL: 2,
            EventType.SWAP: 3,
        }
        if self.priority == 0:
            self.priority = type_priorities.get(self.event_type, 3)


class EventEngine:
    """
    Event-driven simulation engine.

    Maintains a priority queue of events and dispatches them
    to registered handlers in chronological order.

    Usage:
        engine = EventEngine()

        engine.on(EventType.SWAP, handle_swap)
        engine.on(EventType.EXECUTE, handle_execute)

        engine.load_scenario(scenario_df, start_time)

        for event in engine.run():
            pass
    """

    def __init__(self):
        self._event_queue: list[Event] = []
        self._handlers: dict[EventType, list[Callable[[Event], None]]] = {
            et: [] for et in EventType
        }
        self._sequence = itertools.count()
        self._current_time: Optional[int] = None
        self._events_processed: int = 0

    def on(self, event_type: EventType, handler: Callable[[Event], None]):
        """
        Register handler for event type.

        Args:
            event_type: Type of event to handle
            handler: Callback function receiving Event
        """
        self._handlers[event_type].append(handler)

    def add_event(self, event: Event):
        """Add event to queue."""
        if event.sequence == 0:
            event.sequence = next(self._sequence) + 1
        heapq.heappush(self._event_queue, event)

    def add_events(self, events: list[Event]):
        """Add multiple events to queue."""
        for event in events:
            self.add_event(event)

    def schedule(
        self,
        timestamp: int,
        event_type: EventType,
        data: Any = None,
        account: str = "",
    ) -> Event:
        """Create and queue an event."""
        event = Event(timestamp=timestamp, event_type=event_type, data=data, account=account)
        self.add_event(event)
        return event

    def load_scenario(self, df: pd.DataFrame, start_time: int = 0):
        """
        Load scenario rows into the event queue.

        Args:
            df: Scenario with timestamp (seconds from start), account and action columns
            start_time: Host time of offset 0
        """
        for row in df.to_dict("records"):
            self.schedule(
                timestamp=start_time + int(row["timestamp"]),
                event_type=EventType(row["action"]),
                data=row,
                account=row["account"],
            )

    def run(self) -> Iterator[Event]:
        """
        Run simulation, yielding events in chronological order.

        Handlers may schedule further events; they are picked up in order.

        Yields:
            Events in timestamp order
        """
        while self._event_queue:
            event = heapq.heappop(self._event_queue)
            self._current_time = event.timestamp
            self._events_processed += 1

            for handler in self._handlers[event.event_type]:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(f"Event handler error: {e}")

            yield event

    def run_until(self, end_time: int) -> Iterator[Event]:
        """
        Run simulation until specified time.

        Args:
            end_time: Stop when event timestamp exceeds this

        Yields:
            Events up to end_time
        """
        while self._event_queue and self._event_queue[0].timestamp <= end_time:
            yield from itertools.islice(self.run(), 1)

    @property
    def current_time(self) -> Optional[int]:
        """Get current simulation time."""
        return self._current_time

    @property
    def events_remaining(self) -> int:
        """Get number of events remaining in queue."""
        return len(self._event_queue)

    @property
    def events_processed(self) -> int:
        """Get number of events processed."""
        return self._events_processed

    def peek(self) -> Optional[Event]:
        """Peek at next event without removing it."""
        return self._event_queue[0] if self._event_queue else None

    def clear(self):
        """Clear all events."""
        self._event_queue.clear()
        self._events_processed = 0
        self._current_time = None
