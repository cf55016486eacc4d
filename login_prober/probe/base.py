"""Browser driver interface used by the probe engine."""

from abc import ABC, abstractmethod
from typing import Any


class DriverError(Exception):
    """A browser step failed (navigation, wait, missing element, ...)."""


class LaunchError(DriverError):
    """The browser process could not be started or warmed up."""


class BrowserDriver(ABC):
    """
    Narrow capability surface over a browser page.

    Every operation may block until the page reaches the requested state and
    raises DriverError when it cannot. Implementations are single-use: one
    driver per probe run.
    """

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load the given URL in the page."""

    @abstractmethod
    async def wait_visible(self, locator: str) -> None:
        """Block until the element matching locator is visible."""

    @abstractmethod
    async def click(self, locator: str) -> None:
        """Click the element matching locator once it is visible."""

    @abstractmethod
    async def send_keys(self, locator: str, text: str) -> None:
        """Type text into the element matching locator."""

    @abstractmethod
    async def read_text(self, locator: str) -> str:
        """Return the rendered text of the element matching locator."""

    @abstractmethod
    async def query_node(self, locator: str) -> Any:
        """
        Resolve locator to a handle of the first visible matching node.

        Raises:
            DriverError: If no node matches
        """

    @abstractmethod
    async def dispatch_keystrokes(self, node: Any, text: str) -> None:
        """Send text as key events to a node returned by query_node."""
