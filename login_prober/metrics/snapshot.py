"""Per-request metrics snapshot built from a probe result."""

from dataclasses import dataclass
from typing import Tuple

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from ..probe.timing import ProbeResult

LABELS = ("target", "login_type")


@dataclass(frozen=True)
class GaugeSample:
    name: str
    documentation: str
    value: float


@dataclass(frozen=True)
class Snapshot:
    """Gauge values for one probe request, all labeled with the same target and login type."""

    target: str
    login_type: str
    samples: Tuple[GaugeSample, ...]

    def value(self, name: str) -> float:
        """
        Look up a gauge value by metric name.

        Raises:
            KeyError: If the snapshot has no such gauge
        """
        for sample in self.samples:
            if sample.name == name:
                return sample.value
        raise KeyError(name)


def build_snapshot(target: str, login_type: str, result: ProbeResult) -> Snapshot:
    """
    Map a probe result to its gauges.

    Every gauge is always present; a failed run reports status 0 and -1 for
    each timing.

    Args:
        target: Target name label
        login_type: Login type label
        result: Probe result

    Returns:
        Snapshot: Immutable gauge set for this request
    """
    samples = (
        GaugeSample(
            "login_status",
            "Shows the status of the given target 0 for failure 1 for success",
            1.0 if result.success else 0.0,
        ),
        GaugeSample(
            "login_elapsed_seconds",
            "Shows how long it took to login in seconds",
            result.elapsed,
        ),
        GaugeSample(
            "login_total_elapsed_seconds",
            "Shows how long the whole probe took in seconds, logout included",
            result.elapsed_total,
        ),
        GaugeSample(
            "login_page_load_elapsed_seconds",
            "Seconds until the login page header was visible",
            result.elapsed_page_load,
        ),
        GaugeSample(
            "login_form_visible_elapsed_seconds",
            "Seconds until the login form was visible",
            result.elapsed_form_visible,
        ),
        GaugeSample(
            "login_credentials_elapsed_seconds",
            "Seconds until the credentials were accepted",
            result.elapsed_credentials,
        ),
        GaugeSample(
            "login_totp_elapsed_seconds",
            "Seconds spent on the TOTP step, -1 when the target has no TOTP",
            result.elapsed_totp,
        ),
    )
    return Snapshot(target=target, login_type=login_type, samples=samples)


def render_snapshot(snapshot: Snapshot) -> bytes:
    """
    Render a snapshot in the Prometheus text exposition format.

    A new registry is created for every call and dropped afterwards, so
    nothing from one request can show up in another.

    Args:
        snapshot: Snapshot to render

    Returns:
        bytes: Exposition body
    """
    registry = CollectorRegistry()
    for sample in snapshot.samples:
        gauge = Gauge(sample.name, sample.documentation, LABELS, registry=registry)
        gauge.labels(snapshot.target, snapshot.login_type).set(sample.value)
    return generate_latest(registry)
