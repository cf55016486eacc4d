"""Probe outcome enumeration."""

from enum import Enum


class ProbeOutcome(Enum):
    """How a probe run ended."""

    SUCCESS = "success"
    LAUNCH_FAILED = "launch_failed"
    DRIVER_ERROR = "driver_error"
    TIMEOUT = "timeout"
    ASSERTION_FAILED = "assertion_failed"

    def to_log_part(self) -> str:
        """
        Convert the outcome to the ``part`` tag used in log records.

        Returns:
            str: Diagnostic tag operators filter on
        """
        return {
            ProbeOutcome.SUCCESS: "probe_complete",
            ProbeOutcome.LAUNCH_FAILED: "warmup",
            ProbeOutcome.DRIVER_ERROR: "navigation_error",
            ProbeOutcome.TIMEOUT: "timeout",
            ProbeOutcome.ASSERTION_FAILED: "expected_text_check",
        }[self]
