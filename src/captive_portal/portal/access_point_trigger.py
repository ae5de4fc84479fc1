"""Fallback control that puts the device into its own access point mode."""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional

from captive_portal.network.service import NetworkService, ServiceError

logger = logging.getLogger(__name__)

Spawner = Callable[[Coroutine[Any, Any, None]], "asyncio.Task[None]"]


def _create_task(coro: Coroutine[Any, Any, None]) -> "asyncio.Task[None]":
    return asyncio.get_running_loop().create_task(coro)


class AccessPointTrigger:
    """Issues the start-AP call and tells the host, without waiting for the result.

    The host is told on every activation, even when the call later fails:
    following up (e.g. checking the AP actually came up) is the host's job.
    """

    def __init__(
        self,
        service: NetworkService,
        on_access_point_started: Optional[Callable[[], None]] = None,
        spawn: Optional[Spawner] = None,
    ) -> None:
        """Initialize the trigger.

        Args:
            service: Network service that starts the access point
            on_access_point_started: Host callback, called once per activation
            spawn: Schedules the start-AP coroutine (defaults to a loop task)
        """
        self._service = service
        self._on_access_point_started = on_access_point_started
        self._spawn = spawn or _create_task
        self.activations = 0

    def set_callback(self, on_access_point_started: Callable[[], None]) -> None:
        """Set the host callback.

        Args:
            on_access_point_started: Called once per activation
        """
        self._on_access_point_started = on_access_point_started

    async def _start(self) -> None:
        try:
            await self._service.start_access_point()
            logger.info("Access point start request completed")
        except ServiceError as e:
            logger.error("Access point start failed (ignored): %s", e)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Unexpected error starting access point (ignored): %s", e)

    def activate(self) -> "asyncio.Task[None]":
        """Issue the start-AP call and notify the host.

        Must be called from the running event loop.

        Returns:
            The task running the start-AP call
        """
        self.activations += 1
        logger.info("Switching to access point mode")
        task = self._spawn(self._start())

        if self._on_access_point_started:
            try:
                self._on_access_point_started()
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("on_access_point_started callback failed: %s", e)
        return task
