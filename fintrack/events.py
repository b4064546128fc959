import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

__all__ = [
    'Event', 'EventBus', 'DATA_REFRESHED', 'DATA_INVALIDATED', 'FETCH_FAILED',
    'MUTATION_FAILED', 'register_default_handlers',
]

logger = logging.getLogger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        """Call every handler of ``name`` in subscription order and collect their results."""
        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug(f"Publishing {name} to {len(handlers)} handler(s)")
        return [handler(event, payload) for handler in handlers]


DATA_REFRESHED = "DATA_REFRESHED"
DATA_INVALIDATED = "DATA_INVALIDATED"
FETCH_FAILED = "FETCH_FAILED"
MUTATION_FAILED = "MUTATION_FAILED"


def refreshed_handler(event: Event, payload: dict) -> dict:
    counts = payload.get("counts", {})
    return {"loaded": sum(counts.values())}


def fetch_failed_handler(event: Event, payload: dict) -> dict:
    return {"alert": f"Could not load financial data: {payload.get('message', 'unknown error')}"}


def mutation_failed_handler(event: Event, payload: dict) -> dict:
    operation = payload.get("operation", "operation")
    error = payload.get("error", {})
    return {
        "alert": f"{operation} failed: {error.get('message', 'unknown error')}",
        "code": error.get("error"),
    }


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(DATA_REFRESHED, refreshed_handler)
    bus.subscribe(FETCH_FAILED, fetch_failed_handler)
    bus.subscribe(MUTATION_FAILED, mutation_failed_handler)
    return bus
