"""Per-event sync pipeline: classify, normalise, build payload, notify.

Each event gets at most one HTTP request. Failures are logged and the event
is dropped; nothing is retried or persisted.
"""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Protocol

from songwatch.config import SyncConfig
from songwatch.errors import (
    ClassificationRejection,
    RemoteRejection,
    SerializationFailure,
    TransportFailure,
)
from songwatch.schemas.sync import (
    ChangeEvent,
    DispatchResult,
    DispatchStatus,
    RequestPayload,
    SyncIntent,
)
from songwatch.sync.classifier import classify
from songwatch.sync.payloads import build_payload

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Anything that can deliver a payload (``LibraryClient`` in production)."""

    async def send(self, payload: RequestPayload) -> object: ...


class Dispatcher:
    """Turns change events into library requests, one event at a time.

    Usage::

        async with LibraryClient(config.base_url) as client:
            dispatcher = Dispatcher(config, client)
            result = await dispatcher.dispatch(event)
    """

    def __init__(self, config: SyncConfig, notifier: Notifier | None, *, dry_run: bool = False) -> None:
        if notifier is None and not dry_run:
            raise ValueError("notifier is required unless dry_run is set")
        self._config = config
        self._notifier = notifier
        self._dry_run = dry_run

    def plan(self, event: ChangeEvent) -> tuple[SyncIntent, RequestPayload | None]:
        """Classify an event and build its payload without sending anything.

        Returns:
            Tuple of (intent, payload). The payload is None for rejected events.

        Raises:
            SerializationFailure: If the payload cannot be built.
        """
        intent = classify(
            event,
            trash_marker=self._config.trash_marker,
            extension=self._config.extension,
        )
        try:
            payload = build_payload(intent, extension=self._config.extension)
        except ClassificationRejection:
            return intent, None
        return intent, payload

    async def dispatch(self, event: ChangeEvent) -> DispatchResult:
        """Process a single change event end to end."""
        intent = classify(
            event,
            trash_marker=self._config.trash_marker,
            extension=self._config.extension,
        )

        payload = None
        try:
            payload = build_payload(intent, extension=self._config.extension)
            if self._dry_run:
                logger.info("[dry-run] %s %s", payload.verb, payload.to_dict())
            else:
                logger.info("%s detected: %s", intent.kind, payload.to_dict())
                await self._notifier.send(payload)
        except ClassificationRejection as exc:
            logger.warning("Rejected %s event for %s: %s", event.operation, event.path, exc)
            return self._result(event, intent, None, DispatchStatus.REJECTED, str(exc))
        except SerializationFailure as exc:
            logger.error("Could not build payload for %s: %s", event.path, exc)
            return self._result(event, intent, None, DispatchStatus.FAILED, str(exc))
        except (TransportFailure, RemoteRejection) as exc:
            logger.error("Dropping %s for %s: %s", intent.kind, event.path, exc)
            return self._result(event, intent, payload, DispatchStatus.FAILED, str(exc))

        status = DispatchStatus.PLANNED if self._dry_run else DispatchStatus.SENT
        return self._result(event, intent, payload, status)

    async def run(self, queue: "asyncio.Queue[ChangeEvent]") -> None:
        """Drain ``queue`` in arrival order until cancelled."""
        logger.debug("Dispatcher worker started")
        while True:
            event = await queue.get()
            try:
                await self.dispatch(event)
            except Exception:
                logger.exception("Unexpected error dispatching %s %s", event.operation, event.path)
            finally:
                queue.task_done()

    @staticmethod
    def _result(
        event: ChangeEvent,
        intent: SyncIntent,
        payload: RequestPayload | None,
        status: DispatchStatus,
        error_message: str = "",
    ) -> DispatchResult:
        return DispatchResult(
            timestamp=datetime.now(UTC),
            event=event,
            intent=intent,
            payload=payload,
            status=status,
            error_message=error_message,
        )
