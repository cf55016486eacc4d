"""Probe execution engine."""

import asyncio
import logging
import time
from typing import AsyncContextManager, Callable

from ..config.models import ProberSettings, TargetConfig
from ..utils.status import ProbeOutcome
from .base import BrowserDriver, DriverError, LaunchError
from .flows import flow_for
from .playwright_driver import PlaywrightDriver
from .steps import run_steps
from .timing import Milestone, ProbeResult, ProbeRun, derive_result
from .totp import TotpGenerator, generate_code

# (settings, timeout seconds, logger) -> async context manager yielding a fresh driver
DriverFactory = Callable[[ProberSettings, float, logging.Logger], AsyncContextManager[BrowserDriver]]


def playwright_driver_factory(
    settings: ProberSettings,
    timeout: float,
    logger: logging.Logger
) -> AsyncContextManager[BrowserDriver]:
    """Launch a dedicated headless Chromium per run."""
    return PlaywrightDriver.launch(headless=settings.headless, timeout=timeout, logger=logger)


class ProbeEngine:
    """
    Runs one synthetic login per call against a target.

    The engine holds no per-run state, so a single instance serves concurrent
    requests; every run gets its own browser and its own ProbeRun.
    """

    def __init__(
        self,
        settings: ProberSettings,
        logger: logging.Logger,
        driver_factory: DriverFactory = playwright_driver_factory,
        totp_generator: TotpGenerator = generate_code,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time
    ):
        """
        Initialize probe engine.

        Args:
            settings: Process settings (default timeout, headless mode)
            logger: Logger instance
            driver_factory: Creates the browser driver context for a run
            totp_generator: (seed, instant) -> one-time code
            clock: Monotonic clock used for milestones
            wall_clock: Unix time source used for the TOTP window
        """
        self.settings = settings
        self.logger = logger.getChild(self.__class__.__name__)
        self.driver_factory = driver_factory
        self.totp_generator = totp_generator
        self.clock = clock
        self.wall_clock = wall_clock

    def timeout_for(self, config: TargetConfig) -> float:
        return config.timeout or self.settings.timeout

    async def run(self, config: TargetConfig) -> ProbeResult:
        """
        Probe the target's login flow.

        Never raises: launch failures, driver errors, the deadline and an
        expected-text mismatch all come back as a failed ProbeResult whose
        timings are all -1.

        Args:
            config: Target configuration

        Returns:
            ProbeResult: Outcome and phase latencies
        """
        timeout = self.timeout_for(config)
        run = ProbeRun(
            target=config,
            logger=self.logger,
            clock=self.clock,
            wall_clock=self.wall_clock,
            totp_generator=self.totp_generator,
        )
        log_fields = {"subsystem": "driver", "target": config.target}

        try:
            await asyncio.wait_for(self._execute(run, timeout), timeout=timeout)

        except asyncio.TimeoutError:
            return self._failed(
                ProbeOutcome.TIMEOUT,
                f"probe did not finish within {timeout:g}s",
                log_fields
            )

        except LaunchError as e:
            return self._failed(ProbeOutcome.LAUNCH_FAILED, str(e), log_fields)

        except DriverError as e:
            return self._failed(ProbeOutcome.DRIVER_ERROR, str(e), log_fields)

        except Exception as e:
            self.logger.error(
                f"Unexpected probe error: {e}",
                exc_info=True,
                extra={**log_fields, "part": ProbeOutcome.DRIVER_ERROR.to_log_part()}
            )
            return ProbeResult.failed(ProbeOutcome.DRIVER_ERROR)

        if config.expected_text not in (run.captured_text or ""):
            return self._failed(
                ProbeOutcome.ASSERTION_FAILED,
                "expected text not found in page, marking probe as failed",
                log_fields
            )

        result = derive_result(run)
        self.logger.debug(
            "probe completed successfully",
            extra={
                **log_fields,
                "part": result.outcome.to_log_part(),
                "elapsed_page_load": result.elapsed_page_load,
                "elapsed_form": result.elapsed_form_visible,
                "elapsed_credentials": result.elapsed_credentials,
                "elapsed_totp": result.elapsed_totp,
                "elapsed_login": result.elapsed,
                "elapsed_total": result.elapsed_total,
            }
        )
        return result

    async def _execute(self, run: ProbeRun, timeout: float) -> None:
        """Launch a browser, run the target's flow, and tear the browser down."""
        steps = flow_for(run.target.login_type).build_steps(run.target)

        async with self.driver_factory(self.settings, timeout, self.logger) as driver:
            await run_steps(steps, driver, run)
            run.mark(Milestone.STOP)

    def _failed(self, outcome: ProbeOutcome, message: str, log_fields: dict) -> ProbeResult:
        self.logger.warning(message, extra={**log_fields, "part": outcome.to_log_part()})
        return ProbeResult.failed(outcome)
