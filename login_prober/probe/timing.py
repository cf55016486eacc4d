"""Milestone timing model and probe result."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional

from ..config.models import TargetConfig
from ..utils.status import ProbeOutcome
from .totp import TotpGenerator, generate_code

# Timing value reported for every field of a failed run, and for the TOTP
# field of a run without a second factor.
SENTINEL = -1.0


class Milestone(Enum):
    """Named instants captured during a probe run."""

    START = "start"
    PAGE_LOAD = "page_load"
    FORM_VISIBLE = "form_visible"
    CREDENTIALS = "credentials"
    LOGIN_DONE = "login_done"
    STOP = "stop"


@dataclass
class ProbeRun:
    """
    Mutable state of a single probe invocation.

    Created fresh by the engine for every run and dropped when the run
    returns. ``clock`` must be monotonic; ``wall_clock`` is only used to pick
    the TOTP time window.
    """

    target: TargetConfig
    logger: logging.Logger
    clock: Callable[[], float] = time.monotonic
    wall_clock: Callable[[], float] = time.time
    totp_generator: TotpGenerator = generate_code
    milestones: Dict[Milestone, float] = field(default_factory=dict)
    captured_text: Optional[str] = None

    def mark(self, milestone: Milestone) -> None:
        """Record the current instant for milestone."""
        self.milestones[milestone] = self.clock()

    def since_start(self, milestone: Milestone) -> float:
        return self.milestones[milestone] - self.milestones[Milestone.START]


@dataclass(frozen=True)
class ProbeResult:
    """Outcome and per-phase latencies (seconds) of a completed probe run."""

    success: bool
    elapsed: float
    elapsed_total: float
    elapsed_page_load: float
    elapsed_form_visible: float
    elapsed_credentials: float
    elapsed_totp: float
    outcome: ProbeOutcome = ProbeOutcome.SUCCESS

    @classmethod
    def failed(cls, outcome: ProbeOutcome) -> "ProbeResult":
        """Build a failed result with every timing set to the sentinel."""
        return cls(
            success=False,
            elapsed=SENTINEL,
            elapsed_total=SENTINEL,
            elapsed_page_load=SENTINEL,
            elapsed_form_visible=SENTINEL,
            elapsed_credentials=SENTINEL,
            elapsed_totp=SENTINEL,
            outcome=outcome,
        )


def derive_result(run: ProbeRun) -> ProbeResult:
    """
    Derive phase durations from the milestones of a successful run.

    Args:
        run: Run whose steps all completed, STOP included

    Returns:
        ProbeResult: Successful result

    Raises:
        KeyError: If a milestone required by the target's flow was not captured
    """
    if run.target.has_totp:
        elapsed_credentials = run.since_start(Milestone.CREDENTIALS)
        elapsed_totp = run.milestones[Milestone.LOGIN_DONE] - run.milestones[Milestone.CREDENTIALS]
    else:
        elapsed_credentials = run.since_start(Milestone.LOGIN_DONE)
        elapsed_totp = SENTINEL

    return ProbeResult(
        success=True,
        elapsed=run.since_start(Milestone.LOGIN_DONE),
        elapsed_total=run.since_start(Milestone.STOP),
        elapsed_page_load=run.since_start(Milestone.PAGE_LOAD),
        elapsed_form_visible=run.since_start(Milestone.FORM_VISIBLE),
        elapsed_credentials=elapsed_credentials,
        elapsed_totp=elapsed_totp,
        outcome=ProbeOutcome.SUCCESS,
    )
