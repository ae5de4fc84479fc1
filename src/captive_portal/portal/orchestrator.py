"""Connection orchestrator that drives the portal with a state machine.

This module provides the ConnectionOrchestrator class which owns the scan
and connect states of the captive portal. User actions and service
completions are posted to an event queue and handled one at a time on the
event loop, so no locks are needed: "a connect attempt is in progress" is
just a state.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Dict, List, Optional, Set

from captive_portal.network.service import NetworkService
from captive_portal.portal.access_point_trigger import AccessPointTrigger
from captive_portal.portal.events import (
    AccessPointRequested,
    ConnectCompleted,
    CredentialsConfirmed,
    NetworkSelected,
    PortalEvent,
    RefreshRequested,
    ScanCompleted,
)
from captive_portal.portal.notifications import (
    DEFAULT_NOTIFICATION_TIMEOUT,
    NotificationLog,
    Notifier,
    connect_rejected,
)
from captive_portal.portal.state import ConnectState, PortalSnapshot, ScanState

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[PortalSnapshot], None]


class ConnectionOrchestrator:  # pylint: disable=too-many-instance-attributes
    """Coordinates network discovery and connect attempts.

    The ConnectionOrchestrator:
    - Scans once when first activated, and on every refresh
    - Locks the list while a connect attempt is in flight
    - Tells the host about a successful connect, exactly once
    - Warns and re-scans when a network rejects the credentials
    - Shows an error (and waits for the user) when the service itself fails
    """

    # pylint: disable=too-many-arguments
    def __init__(
        self,
        service: NetworkService,
        notify: Optional[Notifier] = None,
        on_connected: Optional[Callable[[str], None]] = None,
        on_access_point_started: Optional[Callable[[], None]] = None,
        notification_timeout: float = DEFAULT_NOTIFICATION_TIMEOUT,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            service: Network service used for scan, connect and start-AP
            notify: Sink for user-visible notifications
            on_connected: Host callback receiving the joined essid
            on_access_point_started: Host callback for the AP fallback
            notification_timeout: Seconds a rejected-connect warning stays up
        """
        self._service = service
        self._notify: Notifier = notify or NotificationLog()
        self._on_connected = on_connected
        self._notification_timeout = notification_timeout
        self._access_point = AccessPointTrigger(
            service, on_access_point_started, spawn=self._spawn
        )

        self._events: "asyncio.Queue[PortalEvent]" = asyncio.Queue()
        self._tasks: Set["asyncio.Task[None]"] = set()
        self._listeners: List[SnapshotListener] = []
        self._handlers: Dict[type, Callable[[Any], None]] = {
            RefreshRequested: self._on_refresh_requested,
            NetworkSelected: self._on_network_selected,
            CredentialsConfirmed: self._on_credentials_confirmed,
            AccessPointRequested: self._on_access_point_requested,
            ScanCompleted: self._on_scan_completed,
            ConnectCompleted: self._on_connect_completed,
        }

        self._activated = False
        self._scan_sequence = 0
        self._scan_state = ScanState.IDLE
        self._networks: tuple = ()
        self._error = False
        self._connect_state = ConnectState.NOT_CONNECTING
        self._connected_essid: Optional[str] = None
        self._published = self.snapshot()

        logger.debug("ConnectionOrchestrator initialized")

    # -------------------------------------------------------------------------
    # Host-facing API
    # -------------------------------------------------------------------------

    def set_callbacks(
        self,
        on_connected: Optional[Callable[[str], None]] = None,
        on_access_point_started: Optional[Callable[[], None]] = None,
        notify: Optional[Notifier] = None,
    ) -> None:
        """Set host callbacks.

        Args:
            on_connected: Callback receiving the joined essid
            on_access_point_started: Callback for the AP fallback
            notify: Sink for user-visible notifications
        """
        if on_connected is not None:
            self._on_connected = on_connected
        if on_access_point_started is not None:
            self._access_point.set_callback(on_access_point_started)
        if notify is not None:
            self._notify = notify

    def add_listener(self, listener: SnapshotListener) -> None:
        """Register a callable that receives every new snapshot.

        Args:
            listener: Called with the snapshot after each state change
        """
        self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        """Unregister a snapshot listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> PortalSnapshot:
        """Get the current portal state.

        Returns:
            Immutable PortalSnapshot
        """
        return PortalSnapshot(
            scan_state=self._scan_state,
            networks=self._networks,
            error=self._error,
            connect_state=self._connect_state,
            connected_essid=self._connected_essid,
        )

    def is_connecting(self) -> bool:
        """Whether a connect attempt is in flight."""
        return self._connect_state == ConnectState.CONNECTING

    # -------------------------------------------------------------------------
    # User actions (posted to the queue)
    # -------------------------------------------------------------------------

    def post(self, event: PortalEvent) -> None:
        """Queue an event for the event loop.

        Args:
            event: Event to handle
        """
        self._events.put_nowait(event)

    def activate(self) -> None:
        """Refresh the first time the portal becomes active; later calls do nothing."""
        if self._activated:
            logger.debug("Portal already active")
            return
        self._activated = True
        logger.info("Portal activated")
        self.refresh()

    def refresh(self) -> None:
        """Drop the current list and scan again."""
        self.post(RefreshRequested())

    def select_open_network(self, essid: str) -> None:
        """Join a listed open network.

        Args:
            essid: Network name
        """
        self.post(NetworkSelected(essid))

    def select_protected_network(self, essid: str, password: str) -> None:
        """Join a protected or hidden network with confirmed credentials.

        Args:
            essid: Network name
            password: Password as typed, forwarded unchanged
        """
        self.post(CredentialsConfirmed(essid, password))

    def request_access_point(self) -> None:
        """Fall back to access point mode."""
        self.post(AccessPointRequested())

    # -------------------------------------------------------------------------
    # Event loop
    # -------------------------------------------------------------------------

    async def run(self) -> None:
        """Handle events forever. Run this as a task on the portal's event loop."""
        logger.info("Portal event loop started")
        while True:
            event = await self._events.get()
            self._dispatch(event)

    async def settle(self) -> None:
        """Handle events until no service call is outstanding."""
        while True:
            while not self._events.empty():
                self._dispatch(self._events.get_nowait())

            pending = {task for task in self._tasks if not task.done()}
            if not pending:
                if self._events.empty():
                    return
                continue
            await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)

    def _dispatch(self, event: PortalEvent) -> None:
        logger.debug("Handling %s", type(event).__name__)
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning("No handler for event: %r", event)
            return
        handler(event)
        self._publish()

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> "asyncio.Task[None]":
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _publish(self) -> None:
        snapshot = self.snapshot()
        if snapshot == self._published:
            return
        self._published = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("Snapshot listener failed: %s", e)

    # -------------------------------------------------------------------------
    # Scanning
    # -------------------------------------------------------------------------

    async def _scan(self, sequence: int) -> None:
        try:
            networks = await self._service.scan_networks()
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.post(ScanCompleted(sequence, error=e))
            return
        self.post(ScanCompleted(sequence, networks=tuple(networks)))

    def _on_refresh_requested(self, _event: RefreshRequested) -> None:
        if self._connect_state == ConnectState.CONNECTING:
            logger.warning("Ignoring refresh while connecting")
            return
        if self._connect_state == ConnectState.SUCCEEDED:
            logger.warning("Ignoring refresh, already connected to %s", self._connected_essid)
            return

        self._networks = ()
        self._error = False
        self._connect_state = ConnectState.NOT_CONNECTING
        self._scan_state = ScanState.LOADING
        self._scan_sequence += 1
        logger.info("Scanning for networks (scan #%d)", self._scan_sequence)
        self._spawn(self._scan(self._scan_sequence))

    def _on_scan_completed(self, event: ScanCompleted) -> None:
        if event.sequence != self._scan_sequence:
            logger.debug(
                "Discarding stale scan #%d (latest is #%d)", event.sequence, self._scan_sequence
            )
            return

        if event.error is not None:
            logger.error("Network scan failed: %s", event.error)
            self._scan_state = ScanState.FAILED
            self._networks = ()
            self._error = True
            return

        self._scan_state = ScanState.LOADED
        self._networks = event.networks
        logger.info("Scan #%d found %d networks", event.sequence, len(event.networks))

    # -------------------------------------------------------------------------
    # Connecting
    # -------------------------------------------------------------------------

    def _can_interact(self, action: str) -> bool:
        if self._connect_state == ConnectState.CONNECTING:
            logger.warning("Ignoring %s while connecting", action)
            return False
        if self._connect_state == ConnectState.SUCCEEDED:
            logger.warning("Ignoring %s, already connected to %s", action, self._connected_essid)
            return False
        return True

    def _on_network_selected(self, event: NetworkSelected) -> None:
        if not self._can_interact("network selection"):
            return

        network = next((n for n in self._networks if n.essid == event.essid), None)
        if network is None or network.is_protected:
            logger.warning("%s is not an open network in the current list", event.essid)
            return

        self.attempt_connect(event.essid, "")

    def _on_credentials_confirmed(self, event: CredentialsConfirmed) -> None:
        if not self._can_interact("credentials"):
            return
        self.attempt_connect(event.essid, event.password)

    def attempt_connect(self, essid: str, password: str) -> None:
        """Start a connect attempt. Must be called on the event loop.

        Args:
            essid: Network name
            password: Network password (empty for open networks)
        """
        if not self._can_interact("connect attempt"):
            return

        self._connect_state = ConnectState.CONNECTING
        self._networks = ()
        self._error = False
        self._scan_state = ScanState.IDLE
        # Outstanding scans must not repopulate the locked list
        self._scan_sequence += 1
        logger.info("Connecting to %s", essid)
        self._spawn(self._connect(essid, password))
        self._publish()

    async def _connect(self, essid: str, password: str) -> None:
        try:
            result = await self._service.connect(essid, password)
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.post(ConnectCompleted(essid, error=e))
            return
        self.post(ConnectCompleted(essid, result=result))

    def _on_connect_completed(self, event: ConnectCompleted) -> None:
        if self._connect_state != ConnectState.CONNECTING:
            logger.warning(
                "Connect result for %s in unexpected state: %s",
                event.essid,
                self._connect_state.value,
            )
            return

        if event.error is not None or event.result is None:
            logger.error("Connect call for %s failed: %s", event.essid, event.error)
            self._connect_state = ConnectState.FAILED
            self._error = True
            return

        if event.result.success:
            self._connect_state = ConnectState.SUCCEEDED
            self._connected_essid = event.essid
            logger.info("Connected to %s", event.essid)
            self._publish()
            if self._on_connected:
                try:
                    self._on_connected(event.essid)
                except Exception as e:  # pylint: disable=broad-exception-caught
                    logger.error("on_connected callback failed: %s", e)
            return

        logger.warning("Connection to %s rejected: %s", event.essid, event.result.message)
        self._connect_state = ConnectState.NOT_CONNECTING
        try:
            self._notify(connect_rejected(event.essid, self._notification_timeout))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Notifier failed: %s", e)
        self.refresh()

    # -------------------------------------------------------------------------
    # Access point fallback
    # -------------------------------------------------------------------------

    def _on_access_point_requested(self, _event: AccessPointRequested) -> None:
        if self._connect_state == ConnectState.CONNECTING:
            logger.warning("Ignoring access point request while connecting")
            return
        self._access_point.activate()
