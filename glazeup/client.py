"""
GlazeWM IPC Client

Talks to GlazeWM's websocket IPC server: queries the container tree, runs
commands and receives subscribed life-cycle events.

Protocol: every client message is a plain text command (`query workspaces`,
`command --id <id> close`, `sub --events window_managed`) answered by a JSON
message with messageType "client_response". Subscribed events arrive as JSON
messages with messageType "event_subscription".

Every request blocks until its reply arrives. Events received while waiting
for a reply are queued and published on the pub/sub bus by pump().
"""

from __future__ import annotations
import json
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence

import websocket
from pubsub import pub

from . import topics
from .objects import LiveContainer
from .settings import discard


class ClientError(RuntimeError):
    """Raised when the IPC connection fails or a reply cannot be obtained."""


class CommandError(ClientError):
    """Raised when GlazeWM rejects a command."""

    def __init__(self, command: str, error: Optional[str]):
        super().__init__(f"Command '{command}' failed: {error or 'unknown error'}")
        self.command = command
        self.error = error


class Subscription:
    """Handle for an event subscription; unsubscribe() ends it."""

    def __init__(self, client: "GlazeClient", subscription_id: str, events: Sequence[str]):
        self.client = client
        self.subscription_id = subscription_id
        self.events = list(events)
        self.active = True

    def unsubscribe(self):
        """Stop receiving the subscribed events."""
        if not self.active:
            return
        self.active = False
        self.client._unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()


class GlazeClient:
    """Synchronous client for the GlazeWM IPC server."""

    def __init__(
        self,
        url: str = "ws://localhost:6123",
        timeout: float = 10.0,
        log: Optional[Callable[[str], None]] = None,
        connection_factory: Optional[Callable[..., Any]] = None,
    ):
        """Initialize the client.

        Args:
            url: Websocket URL of the GlazeWM IPC server
            timeout: Seconds to wait for a reply before giving up
            log: Diagnostic callback
            connection_factory: Creates the websocket (defaults to
                websocket.create_connection)
        """
        self.url = url
        self.timeout = timeout
        self.log = log if log is not None else discard
        self._connection_factory = connection_factory or websocket.create_connection
        self._ws = None
        self._pending_events: Deque[Dict[str, Any]] = deque()
        self._subscriptions: Dict[str, Subscription] = {}

    @property
    def connected(self) -> bool:
        return self._ws is not None

    def connect(self):
        """Open the websocket connection.

        Raises:
            ClientError: If GlazeWM is not reachable
        """
        if self._ws is not None:
            return
        try:
            self._ws = self._connection_factory(self.url, timeout=self.timeout)
        except (OSError, websocket.WebSocketException) as e:
            raise ClientError(f"Failed to connect to GlazeWM at {self.url}: {e}")
        self.log("Connected to GlazeWM")
        pub.sendMessage(topics.CLIENT_CONNECTED, url=self.url)

    def close(self):
        """Close the connection. Active subscriptions end with it."""
        if self._ws is None:
            return
        try:
            self._ws.close()
        except (OSError, websocket.WebSocketException) as e:
            self.log(f"GlazeWM error: {e}")
        self._ws = None
        for subscription in self._subscriptions.values():
            subscription.active = False
        self._subscriptions.clear()
        self._pending_events.clear()
        self.log("Disconnected from GlazeWM")
        pub.sendMessage(topics.CLIENT_DISCONNECTED, url=self.url)

    def __enter__(self) -> "GlazeClient":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Queries

    def query_workspaces(self) -> List[LiveContainer]:
        """Query every workspace with its full container tree."""
        data = self._request("query workspaces") or {}
        return [
            LiveContainer.from_dict(item)
            for item in data.get("workspaces") or []
            if isinstance(item, dict)
        ]

    def query_windows(self) -> List[LiveContainer]:
        """Query every managed window."""
        data = self._request("query windows") or {}
        return [
            LiveContainer.from_dict(item)
            for item in data.get("windows") or []
            if isinstance(item, dict)
        ]

    # Commands

    def run_command(self, command: str, subject_id: Optional[str] = None) -> Any:
        """Run a WM command, optionally against a specific container.

        Args:
            command: Command string, e.g. "focus --workspace 2"
            subject_id: Container the command applies to (focused one if None)

        Returns:
            Reply data

        Raises:
            CommandError: If GlazeWM rejects the command
        """
        if subject_id:
            message = f"command --id {subject_id} {command}"
        else:
            message = f"command {command}"
        return self._request(message, command=command)

    # Events

    def subscribe(self, events: Sequence[str]) -> Subscription:
        """Subscribe to GlazeWM events (e.g. "window_managed").

        Received events are published on the matching topics.WM_EVENT_TOPICS
        topic with a single `data` argument.
        """
        data = self._request("sub --events " + " ".join(events)) or {}
        subscription_id = data.get("subscriptionId")
        if not subscription_id:
            raise ClientError(f"No subscription id in reply to subscribing {list(events)}")
        subscription = Subscription(self, subscription_id, events)
        self._subscriptions[subscription_id] = subscription
        return subscription

    def _unsubscribe(self, subscription: Subscription):
        self._subscriptions.pop(subscription.subscription_id, None)
        if self._ws is not None:
            self._request(f"unsub --id {subscription.subscription_id}")

    def pump(self, timeout: float = 0.0) -> int:
        """Publish queued events, then wait up to timeout for more.

        Args:
            timeout: Seconds to wait for a new message (0 = only queued ones)

        Returns:
            Number of events published
        """
        published = self._dispatch_pending()
        if published or timeout <= 0:
            return published

        message = self._receive(timeout)
        if message is None:
            return 0
        if message.get("messageType") == "event_subscription":
            self._pending_events.append(message)
        return self._dispatch_pending()

    def _dispatch_pending(self) -> int:
        published = 0
        while self._pending_events:
            message = self._pending_events.popleft()
            if message.get("subscriptionId") not in self._subscriptions:
                continue
            data = message.get("data") or {}
            topic = topics.WM_EVENT_TOPICS.get(data.get("type"))
            if topic is None:
                continue
            pub.sendMessage(topic, data=data)
            published += 1
        return published

    # Transport

    def _request(self, message: str, command: Optional[str] = None) -> Any:
        if self._ws is None:
            raise ClientError("Not connected to GlazeWM")
        try:
            self._ws.send(message)
        except (OSError, websocket.WebSocketException) as e:
            raise ClientError(f"Failed to send '{message}': {e}")

        deadline = time.monotonic() + self.timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ClientError(f"Timed out waiting for reply to '{message}'")
            reply = self._receive(remaining)
            if reply is None:
                continue
            kind = reply.get("messageType")
            if kind == "event_subscription":
                self._pending_events.append(reply)
                continue
            if kind != "client_response" or reply.get("clientMessage") != message:
                continue
            if not reply.get("success", False):
                if command is not None:
                    raise CommandError(command, reply.get("error"))
                raise ClientError(f"'{message}' failed: {reply.get('error')}")
            return reply.get("data")

    def _receive(self, timeout: float) -> Optional[Dict[str, Any]]:
        """Read one JSON message, or None if nothing arrives in time."""
        try:
            self._ws.settimeout(timeout)
            raw = self._ws.recv()
        except (websocket.WebSocketTimeoutException, TimeoutError):
            return None
        except (OSError, websocket.WebSocketException) as e:
            raise ClientError(f"Connection to GlazeWM lost: {e}")
        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            self.log(f"GlazeWM error: invalid message {raw!r}")
            return None
        return message if isinstance(message, dict) else None
