"""Typed browser steps and the interpreter that runs them."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Sequence, Tuple

from .base import BrowserDriver, DriverError
from .timing import Milestone, ProbeRun


class Step(ABC):
    """One action in a login flow."""

    @abstractmethod
    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        """
        Perform the action.

        Raises:
            DriverError: If the browser could not perform it
        """


@dataclass(frozen=True)
class Navigate(Step):
    url: str

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        await driver.navigate(self.url)


@dataclass(frozen=True)
class WaitVisible(Step):
    locator: str

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        await driver.wait_visible(self.locator)


@dataclass(frozen=True)
class Click(Step):
    locator: str

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        await driver.click(self.locator)


@dataclass(frozen=True)
class SendKeys(Step):
    locator: str
    text: str

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        await driver.send_keys(self.locator, self.text)

    def __repr__(self) -> str:
        # Text is usually a credential
        return f"SendKeys(locator={self.locator!r}, text='***')"


@dataclass(frozen=True)
class ReadText(Step):
    """Store the element's text on the run for the expected-text check."""
    locator: str

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        run.captured_text = await driver.read_text(self.locator)


@dataclass(frozen=True)
class SubmitTotp(Step):
    """Type the current one-time code for the target's seed into the TOTP input."""
    locator: str

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        node = await driver.query_node(self.locator)
        if node is None:
            raise DriverError(f"selector {self.locator!r} did not return any nodes")
        try:
            code = run.totp_generator(run.target.totp_seed, run.wall_clock())
        except ValueError as e:
            raise DriverError(str(e)) from e
        await driver.dispatch_keystrokes(node, code)


@dataclass(frozen=True)
class CaptureMilestone(Step):
    milestone: Milestone

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        run.mark(self.milestone)


@dataclass(frozen=True)
class LogStep(Step):
    """Emit a debug record when the flow reaches this point."""
    part: str
    message: str

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        run.logger.debug(
            self.message,
            extra={
                "subsystem": "driver",
                "target": run.target.target,
                "part": self.part,
            }
        )


@dataclass(frozen=True)
class ConditionalBranch(Step):
    """Run nested steps only when condition holds for the run."""
    condition: Callable[[ProbeRun], bool]
    steps: Tuple[Step, ...]

    async def execute(self, driver: BrowserDriver, run: ProbeRun) -> None:
        if self.condition(run):
            await run_steps(self.steps, driver, run)


async def run_steps(steps: Sequence[Step], driver: BrowserDriver, run: ProbeRun) -> None:
    """
    Execute steps in order, stopping at the first failure.

    Args:
        steps: Flow to execute
        driver: Browser driver for this run
        run: Run state receiving milestones and captured text

    Raises:
        DriverError: From the first failing step; later steps are skipped
    """
    for step in steps:
        await step.execute(driver, run)
