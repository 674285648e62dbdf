from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

from .errors import ConfigurationError
from .limit import Limit

if TYPE_CHECKING:
    from .telemetry import Telemetry


@dataclass
class ControllerOptions:
    proportional_gain: float = 1.0
    integral_gain: float = 0.0
    derivative_gain: float = 0.0
    output_limit: Limit = field(default_factory=Limit.unbounded)
    error_filter: float = 0.0
    derivative_filter: float = 0.0
    trapezoidal_integral: bool = False
    telemetry: Optional[Telemetry] = None


# An option edits the options in place and may raise ConfigurationError.
Option = Callable[[ControllerOptions], None]


def with_proportional_gain(proportional_gain: float) -> Option:
    """Set Kp. Higher values shorten rise time but invite overshoot."""
    def apply(o: ControllerOptions):
        o.proportional_gain = proportional_gain
    return apply


def with_integral_gain(integral_gain: float) -> Option:
    """Set Ki. Removes steady-state error at the cost of slower, less stable response."""
    def apply(o: ControllerOptions):
        o.integral_gain = integral_gain
    return apply


def with_derivative_gain(derivative_gain: float) -> Option:
    """Set Kd. Damps overshoot but amplifies measurement noise."""
    def apply(o: ControllerOptions):
        o.derivative_gain = derivative_gain
    return apply


def with_standard_form(proportional_gain: float, integral_time: float, derivative_time: float) -> Option:
    """Configure from the standard form Kp * (1 + 1/(Ti s) + Td s).

    Also enables the derivative filter (Td/8) and the error filter (Td/64).
    """
    def apply(o: ControllerOptions):
        if integral_time == 0:
            raise ConfigurationError("integral time constant must be non-zero")
        o.proportional_gain = proportional_gain
        o.integral_gain = proportional_gain / integral_time
        o.derivative_gain = proportional_gain * derivative_time
        o.derivative_filter = derivative_time / 8.0
        o.error_filter = derivative_time / 64.0
    return apply


def with_ziegler_nichols(ultimate_gain: float, oscillation_period: float) -> Option:
    """Ziegler-Nichols tuning from the ultimate gain and its oscillation period."""
    return with_standard_form(
        0.6 * ultimate_gain,
        oscillation_period / 2.0,
        oscillation_period / 8.0,
    )


def with_error_filter(time_constant: float) -> Option:
    """Low-pass filter the error. Larger time constants smooth more and respond slower."""
    def apply(o: ControllerOptions):
        o.error_filter = time_constant
    return apply


def with_output_limit(lower: float, upper: float) -> Option:
    def apply(o: ControllerOptions):
        o.output_limit = Limit(float(lower), float(upper))
    return apply


def with_trapezoidal_integral(enabled: bool = True) -> Option:
    """Integrate with the trapezoidal rule instead of the rectangular (Euler) one.

    Trapezoidal integration is more accurate at slow sampling rates; the
    rectangular rule is usually enough for fast loops.
    """
    def apply(o: ControllerOptions):
        o.trapezoidal_integral = enabled
    return apply


def with_telemetry(telemetry: Telemetry) -> Option:
    def apply(o: ControllerOptions):
        o.telemetry = telemetry
    return apply


def with_options(*opts: Option) -> Option:
    """Bundle several options into one, applied in the given order."""
    def apply(o: ControllerOptions):
        for opt in opts:
            opt(o)
    return apply
