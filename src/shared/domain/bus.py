"""Publish/subscribe contracts between aggregates and their side effects.

Order handlers (audit logging, the refund email) implement
``IEventHandler``; the outbox relay only sees ``IEventBus``.  Handlers are
keyed by the concrete event class, so one handler instance may be
subscribed to several event types.
"""

from __future__ import annotations

from typing import Generic, Protocol, Type, TypeVar

from shared.domain.events import DomainEvent

EventT = TypeVar("EventT", bound=DomainEvent, contravariant=True)


class IEventHandler(Protocol, Generic[EventT]):
    """Reacts to one committed domain event."""

    def handle(self, event: EventT) -> None: ...


class IEventBus(Protocol):
    """Routes committed events to the handlers subscribed to their class."""

    def publish(self, event: DomainEvent) -> None: ...

    def subscribe(
        self, event_class: Type[EventT], handler: IEventHandler[EventT]
    ) -> None: ...

    def unsubscribe(
        self, event_class: Type[EventT], handler: IEventHandler[EventT]
    ) -> None: ...
