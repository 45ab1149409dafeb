import asyncio
import logging
from foodadmin.models.outbox import OutboxEvent
from foodadmin.events.bus import EventBus, event_bus
from foodadmin.core.config import POLLING_INTERVAL, MAX_ATTEMPTS, BATCH_SIZE

log = logging.getLogger(__name__)


def event_message(event: OutboxEvent) -> dict:
    """The JSON shape delivered to subscribers and live screens."""
    return {
        "id": str(event.id),
        "event_type": event.event_type,
        "aggregate_type": event.aggregate_type,
        "aggregate_id": str(event.aggregate_id) if event.aggregate_id else None,
        "payload": event.payload,
        "created_at": str(event.created_at),
    }


async def dispatch_event(event: OutboxEvent, bus: EventBus = event_bus) -> int:
    """Routes an OutboxEvent to every subscriber registered for its type."""
    log.debug(f"Poller DISPATCHING: {event.event_type} (ID: {event.id.hex[:8]}...)")
    delivered = await bus.publish(event.event_type, event_message(event))
    if not delivered:
        log.debug(f"No subscriber for event type: {event.event_type}")
    return delivered


async def poll_outbox_for_new_events(bus: EventBus = event_bus) -> int:
    """
    Queries the Outbox table for unpublished events and attempts to dispatch them.
    Returns the number of events published in this pass.
    """
    # Select events that haven't been published and haven't exceeded max attempts
    events = await OutboxEvent.filter(published=False, attempts__lt=MAX_ATTEMPTS).order_by('created_at').limit(BATCH_SIZE)

    published = 0
    for event in events:
        try:
            await dispatch_event(event, bus)

            event.published = True
            await event.save(update_fields=['published'])
            published += 1
        except Exception:
            # Increment attempts on failure and save
            event.attempts += 1
            await event.save(update_fields=['attempts'])
            log.exception(f"Failed to publish outbox event {event.id} (attempt {event.attempts}/{MAX_ATTEMPTS})")
    return published


async def run_outbox_poller(bus: EventBus = event_bus, interval: float = POLLING_INTERVAL):
    """Main loop for the poller; runs as a background task of the API process."""
    log.info("Outbox poller started.")
    try:
        while True:
            try:
                await poll_outbox_for_new_events(bus)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log.error(f"Poller encountered a critical DB error: {e}.")

            await asyncio.sleep(interval)
    finally:
        log.info("Outbox poller stopped.")
