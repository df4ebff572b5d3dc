"""Alert notification delivery.

The notification sink is an external collaborator: the core makes at most
one delivery attempt per alert and never retries. Delivery runs as an
independent task so its latency or failure can never delay or fail a
generation cycle; the outcome is only logged.
"""

import asyncio
import threading
from collections.abc import Coroutine
from typing import Any, Protocol

import httpx

from glucos.logging_config import get_logger
from glucos.models.alert import AlertSeverity
from glucos.models.events import TrendDirection
from glucos.services.trend import trend_description

logger = get_logger(__name__)

# Severity -> emoji mapping
SEVERITY_EMOJI: dict[AlertSeverity, str] = {
    AlertSeverity.NONE: "\u2139\ufe0f",  # ℹ️
    AlertSeverity.WARNING: "\u26a0\ufe0f",  # ⚠️
    AlertSeverity.CRITICAL: "\U0001f6a8",  # 🚨
}

# Severity -> recommended action
SEVERITY_ACTION: dict[AlertSeverity, str] = {
    AlertSeverity.NONE: "No action needed",
    AlertSeverity.WARNING: "Check your glucose again in 15 minutes",
    AlertSeverity.CRITICAL: "Act now and contact your care team if it persists",
}


class NotificationDeliveryError(Exception):
    """Error delivering an alert to the notification collaborator."""


class NotificationSink(Protocol):
    """Receiver of alert notifications (email, push, chat, ...)."""

    async def notify(
        self,
        severity: AlertSeverity,
        bgl: int,
        trend: TrendDirection,
        rationale: str,
    ) -> None: ...


def format_alert_message(
    severity: AlertSeverity,
    bgl: int,
    trend: TrendDirection,
    rationale: str,
) -> str:
    """Format an alert into a plain-text notification message.

    Args:
        severity: Alert severity tier.
        bgl: Glucose value in mg/dL.
        trend: Trend direction at the time of the alert.
        rationale: Alert engine rationale.

    Returns:
        Multi-line message string.
    """
    emoji = SEVERITY_EMOJI.get(severity, "\u2139\ufe0f")
    action = SEVERITY_ACTION.get(severity, "Check your glucose levels")

    lines = [
        f"{emoji} {severity.value.upper()} glucose alert",
        "",
        f"\U0001f4c9 Glucose: {bgl} mg/dL",
        f"\U0001f4c8 Trend: {trend_description(trend)}",
        "",
        rationale,
        "",
        f"\U0001f4a1 Action: {action}",
    ]
    return "\n".join(lines)


class LogNotificationSink:
    """Sink that only writes alerts to the application log."""

    async def notify(
        self,
        severity: AlertSeverity,
        bgl: int,
        trend: TrendDirection,
        rationale: str,
    ) -> None:
        logger.warning(
            "Glucose alert",
            severity=severity.value,
            bgl=bgl,
            trend=trend.value,
            rationale=rationale,
        )


class WebhookNotificationSink:
    """Sink that POSTs alerts as JSON to an HTTP endpoint."""

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self.url = url
        self.timeout = timeout

    async def notify(
        self,
        severity: AlertSeverity,
        bgl: int,
        trend: TrendDirection,
        rationale: str,
    ) -> None:
        """Send the alert to the webhook.

        Raises:
            NotificationDeliveryError: If the request fails or is rejected.
        """
        payload = {
            "severity": severity.value,
            "bgl": bgl,
            "trend": trend.value,
            "rationale": rationale,
            "text": format_alert_message(severity, bgl, trend, rationale),
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(f"Webhook request failed: {e}") from e

        if response.status_code >= 400:
            raise NotificationDeliveryError(
                f"Webhook rejected alert: {response.status_code} {response.text}"
            )


class NotificationDispatcher:
    """Fire-and-forget bridge between the monitor and a notification sink."""

    def __init__(self, sink: NotificationSink) -> None:
        self.sink = sink
        self._tasks: set[asyncio.Task[None]] = set()
        self._log = logger.bind(sink=type(sink).__name__)

    def dispatch(
        self,
        severity: AlertSeverity,
        bgl: int,
        trend: TrendDirection,
        rationale: str,
    ) -> None:
        """Schedule one delivery attempt and return immediately.

        Inside a running event loop the delivery becomes an independent
        task; otherwise it runs on a short-lived daemon thread with its own
        loop. Never raises.
        """
        try:
            coro = self._deliver(severity, bgl, trend, rationale)
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                self._run_in_thread(coro)
                return
            task = loop.create_task(coro)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        except Exception as e:
            self._log.error(
                "Failed to dispatch alert notification",
                severity=severity.value,
                bgl=bgl,
                error=str(e),
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait for in-flight deliveries (used on shutdown)."""
        if not self._tasks:
            return
        _, still_pending = await asyncio.wait(list(self._tasks), timeout=timeout)
        if still_pending:
            self._log.warning(
                "Alert notifications still pending at shutdown",
                pending=len(still_pending),
            )

    def _run_in_thread(self, coro: Coroutine[Any, Any, None]) -> None:
        thread = threading.Thread(
            target=asyncio.run,
            args=(coro,),
            name="alert-notification",
            daemon=True,
        )
        thread.start()

    async def _deliver(
        self,
        severity: AlertSeverity,
        bgl: int,
        trend: TrendDirection,
        rationale: str,
    ) -> None:
        try:
            await self.sink.notify(severity, bgl, trend, rationale)
            self._log.info(
                "Alert notification delivered",
                severity=severity.value,
                bgl=bgl,
                trend=trend.value,
            )
        except NotificationDeliveryError as e:
            self._log.warning(
                "Failed to deliver alert notification",
                severity=severity.value,
                bgl=bgl,
                error=str(e),
            )
        except Exception as e:
            self._log.error(
                "Unexpected error delivering alert notification",
                severity=severity.value,
                bgl=bgl,
                error=str(e),
            )
