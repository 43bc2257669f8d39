import asyncio
import logging
import sys
from datetime import timedelta

from reminder_engine.config import SchedulerConfig
from reminder_engine.event_system.infrastructure.in_memory_broker import InMemoryBroker
from reminder_engine.event_system.infrastructure.in_memory_consumer import InMemoryConsumer
from reminder_engine.event_system.infrastructure.in_memory_publisher import InMemoryPublisher
from reminder_engine.reminders.domain.notification_event import (
    NOTIFICATION_TOPIC,
    NotificationEvent,
)
from reminder_engine.reminders.domain.policy import ReminderPolicy
from reminder_engine.reminders.infrastructure.clock import ManualClock
from reminder_engine.reminders.infrastructure.in_memory_oracle import InMemoryActivityOracle
from reminder_engine.reminders.infrastructure.in_memory_store import InMemoryPolicyStore
from reminder_engine.reminders.infrastructure.logging_dispatcher import LoggingDispatcher
from reminder_engine.reminders.infrastructure.service import ReminderService


def seed_store(store: InMemoryPolicyStore, oracle: InMemoryActivityOracle) -> None:
    """Populate a store with a handful of demo accounts."""
    store.add_account(
        "ada",
        "ada@example.com",
        "Ada",
        ReminderPolicy(enabled=True, time="20:00", timezone="Europe/Berlin"),
    )
    store.add_account(
        "grace",
        "grace@example.com",
        "Grace",
        ReminderPolicy(enabled=True, time="07:30", timezone="America/New_York"),
    )
    store.add_account(
        "linus",
        "linus@example.com",
        "Linus",
        ReminderPolicy(enabled=True, time="21:15", timezone="Asia/Tokyo", streak_protection=False),
    )
    # Malformed stored policy: skipped at bootstrap.
    store.add_account(
        "broken",
        "broken@example.com",
        "Broken",
        {"enabled": True, "time": "20:00", "timezone": "Mars/Olympus_Mons"},
    )

    oracle.set_streak("ada", 12)
    oracle.record_activity("grace")


async def main(simulated_days: int = 2) -> None:
    """
    Run the reminder engine against in-memory adapters on a simulated clock.
    """
    config = SchedulerConfig.from_env()
    broker: InMemoryBroker[NotificationEvent] = InMemoryBroker()
    publisher: InMemoryPublisher[NotificationEvent] = InMemoryPublisher(broker)
    consumer: InMemoryConsumer[NotificationEvent] = InMemoryConsumer(broker)

    store = InMemoryPolicyStore()
    oracle = InMemoryActivityOracle()
    dispatcher = LoggingDispatcher()
    clock = ManualClock()
    seed_store(store, oracle)

    service = ReminderService(store, oracle, dispatcher, clock, config, publisher)
    result = await service.initialize_all()
    logging.info(f"Bootstrap: {result.to_dict()}")

    await service.start()

    event = await service.trigger_now("ada")
    logging.info(f"Manual trigger: {event.to_dict()}")

    for _ in range(simulated_days * 24):
        clock.advance(timedelta(hours=1))
        # Let the dispatch loop observe the new time before collecting workers.
        for _ in range(5):
            await asyncio.sleep(0)
        await service.registry.wait_idle()
        if clock.now().hour == 0:
            oracle.reset_day()

    await service.stop()

    for notification in consumer.drain(NOTIFICATION_TOPIC):
        logging.info(f"Notification: {notification.to_dict()}")
    logging.info(f"Sent {len(dispatcher.sent)} notifications")


if __name__ == "__main__":
    logging.basicConfig(
        level=SchedulerConfig.from_env().log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    days = 2
    if len(sys.argv) > 1:
        try:
            days = int(sys.argv[1])
        except ValueError:
            logging.error(
                f"Usage: python -m reminder_engine.main [simulated_days], got {sys.argv[1]!r}"
            )
            sys.exit(2)

    asyncio.run(main(days))
