"""Shared pytest configuration and fixtures."""

import asyncio
from contextlib import asynccontextmanager

import pytest

from login_prober.config.models import ProberSettings, TargetConfig
from login_prober.probe.base import BrowserDriver, DriverError
from login_prober.probe.engine import ProbeEngine
from login_prober.utils.logger import setup_logger


PAGE_TEXT = "Welcome back, synthetic user"


class FakeClock:
    """Monotonic clock that only moves when the fake driver does something."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def tick(self, seconds: float = 1.0) -> None:
        self.now += seconds


class FakeDriver(BrowserDriver):
    """
    In-memory BrowserDriver.

    Records every call, advances the clock by one second per call, and can
    be told to fail or hang on a given (operation, argument) pair.
    """

    def __init__(self, clock, page_text=PAGE_TEXT, fail_on=None, hang_on=None, step_delay=0.0):
        self.clock = clock
        self.step_delay = step_delay
        self.page_text = page_text
        self.fail_on = fail_on
        self.hang_on = hang_on
        self.calls = []

    async def _record(self, op, arg, *extra):
        self.calls.append((op, arg) + extra)
        if self.step_delay:
            await asyncio.sleep(self.step_delay)
        if self.hang_on == (op, arg):
            await asyncio.sleep(3600)
        if self.fail_on == (op, arg):
            raise DriverError(f"{op} {arg!r} failed")
        self.clock.tick()

    async def navigate(self, url):
        await self._record("navigate", url)

    async def wait_visible(self, locator):
        await self._record("wait_visible", locator)

    async def click(self, locator):
        await self._record("click", locator)

    async def send_keys(self, locator, text):
        await self._record("send_keys", locator, text)

    async def read_text(self, locator):
        await self._record("read_text", locator)
        return self.page_text

    async def query_node(self, locator):
        await self._record("query_node", locator)
        return {"locator": locator}

    async def dispatch_keystrokes(self, node, text):
        await self._record("dispatch_keystrokes", node["locator"], text)

    def ops(self):
        return [call[0] for call in self.calls]


class FakeDriverFactory:
    """Driver factory handing out a new FakeDriver per launch."""

    def __init__(self, clock, launch_error=None, launch_hang=False, **driver_kwargs):
        self.clock = clock
        self.launch_error = launch_error
        self.launch_hang = launch_hang
        self.driver_kwargs = driver_kwargs
        self.drivers = []
        self.closed = 0

    @property
    def driver(self):
        return self.drivers[-1]

    @asynccontextmanager
    async def __call__(self, settings, timeout, logger):
        if self.launch_hang:
            await asyncio.sleep(3600)
        if self.launch_error is not None:
            raise self.launch_error
        driver = FakeDriver(self.clock, **self.driver_kwargs)
        self.drivers.append(driver)
        try:
            yield driver
        finally:
            self.closed += 1


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "DEBUG")


@pytest.fixture
def settings():
    return ProberSettings(timeout=5)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_factory(clock):
    """Build a FakeDriverFactory sharing the test clock."""
    def _make(**kwargs):
        return FakeDriverFactory(clock, **kwargs)
    return _make


@pytest.fixture
def make_engine(settings, logger, clock):
    """Build a ProbeEngine wired to a fake driver factory and the fake clock."""
    def _make(factory, **kwargs):
        kwargs.setdefault("clock", clock)
        return ProbeEngine(settings, logger, driver_factory=factory, **kwargs)
    return _make


@pytest.fixture
def form_target():
    return TargetConfig(
        target="intranet",
        url="https://intranet.example.com/",
        logout_url="https://intranet.example.com/logout",
        expected_header_css_class=".site-header",
        expected_text_css_class=".welcome",
        login_css_class=".login-button",
        username_xpath="//input[@name='username']",
        password_xpath="//input[@name='password']",
        submit_css_class="button[type=submit]",
        username="synthetic",
        password="s3cret",
        expected_text="Welcome back",
        login_type="form",
    )


@pytest.fixture
def totp_target(form_target):
    return form_target.model_copy(update={
        "target": "intranet-2fa",
        "totp_seed": "JBSWY3DPEHPK3PXP",
        "totp_xpath": "//input[@name='otp']",
    })


@pytest.fixture
def federated_target():
    return TargetConfig(
        target="sso",
        url="https://sso.example.com/",
        logout_url="https://sso.example.com/logout",
        username="synthetic",
        password="s3cret",
        expected_text="Welcome back",
        login_type="federated",
    )


@pytest.fixture
def fake_driver(clock):
    return FakeDriver(clock)
