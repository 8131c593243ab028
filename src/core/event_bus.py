"""EventBus - synchronous notification channel between services.

Rules:
- services never call each other directly, they publish on the bus
- event payloads carry identifiers and small scalars only
- propagation depth is capped at MAX_DEPTH
- the same (source, event_type, key) is delivered once per chain
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Any, Set
from collections import defaultdict

from src.core.logging import get_logger

logger = get_logger(__name__)

MAX_DEPTH = 5  # max propagation depth within one request


@dataclass
class GameEvent:
    """Event data container

    Args:
        event_type: event name (see EventTypes)
        data: payload (ids and scalars, no heavy objects)
        source: publishing service name
        key: optional discriminator so one source can publish several
            events of the same type in a chain (e.g. one per world event)
    """

    event_type: str
    data: Dict[str, Any]
    source: str
    key: str = ""

    # internal bookkeeping, never set by publishers
    _depth: int = field(default=0, repr=False)


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """Synchronous event bus

    Usage:
        bus = EventBus()
        bus.subscribe("quest_completed", notifier.handle_quest_completed)
        bus.emit(GameEvent(event_type="quest_completed", data={"quest_id": "q1"}, source="progress"))
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._current_depth: int = 0
        self._emitted_in_chain: Set[str] = set()

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)
        logger.debug("EventBus subscribe: %s -> %s", event_type, handler.__qualname__)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(
                    "EventBus unsubscribe: %s -> %s", event_type, handler.__qualname__
                )
            except ValueError:
                logger.warning(
                    "Handler not registered: %s -> %s", event_type, handler.__qualname__
                )

    def emit(self, event: GameEvent) -> None:
        """Publish an event and call its handlers synchronously.

        Handler exceptions are logged and swallowed: subscribers are
        downstream consumers and must not break the publisher.
        """
        if self._current_depth >= MAX_DEPTH:
            logger.warning(
                "EventBus depth exceeded (%d): %s:%s dropped",
                MAX_DEPTH,
                event.source,
                event.event_type,
            )
            return

        chain_key = f"{event.source}:{event.event_type}:{event.key}"
        if chain_key in self._emitted_in_chain:
            logger.warning("EventBus duplicate blocked: %s", chain_key)
            return

        self._emitted_in_chain.add(chain_key)
        event._depth = self._current_depth

        handlers = self._handlers.get(event.event_type, [])
        if not handlers:
            logger.debug("EventBus: no subscribers for %s", event.event_type)
            return

        logger.debug(
            "EventBus dispatch: %s (source=%s, depth=%d, handlers=%d)",
            event.event_type,
            event.source,
            self._current_depth,
            len(handlers),
        )

        self._current_depth += 1
        try:
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "EventBus handler error: %s (event=%s)",
                        handler.__qualname__,
                        event.event_type,
                    )
        finally:
            self._current_depth -= 1

    def reset_chain(self) -> None:
        """Called at the end of each request. Clears duplicate tracking."""
        self._emitted_in_chain.clear()
        self._current_depth = 0

    def clear(self) -> None:
        """Drop all subscriptions (tests)."""
        self._handlers.clear()
        self.reset_chain()

    @property
    def handler_count(self) -> int:
        return sum(len(h) for h in self._handlers.values())
