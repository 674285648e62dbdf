from __future__ import annotations
import logging
from datetime import timedelta
from typing import Union

from .limit import Limit
from .options import ControllerOptions, Option, with_options

logger = logging.getLogger(__name__)


def to_seconds(delta: Union[timedelta, float]) -> float:
    if isinstance(delta, timedelta):
        return delta.total_seconds()
    return float(delta)


class Controller:
    """Discrete-time PID controller.

    Build it once from options, then call update() once per control loop
    iteration with the time elapsed since the previous call. Only the previous
    error, the integral and the derivative are kept between calls. An instance
    is not safe to share between threads without external locking.

    Example:
        pid = Controller(with_ziegler_nichols(1.7, 2.0), with_output_limit(0.0, 20.0))
        power = pid.update(350.0, temperature, timedelta(seconds=1))
    """

    def __init__(self, *opts: Option):
        cfg = ControllerOptions()
        with_options(*opts)(cfg)

        self.proportional_gain = cfg.proportional_gain
        self.integral_gain = cfg.integral_gain
        self.derivative_gain = cfg.derivative_gain

        # bounding the integral by output/Ki keeps Ki * integral inside the
        # output limit, which prevents windup
        self.output_limit = cfg.output_limit
        self.integral_limit = Limit.unbounded()
        if cfg.integral_gain > 0.0:
            self.integral_limit = Limit(
                cfg.output_limit.lower / cfg.integral_gain,
                cfg.output_limit.upper / cfg.integral_gain,
            )

        self.error_filter = cfg.error_filter
        self.derivative_filter = cfg.derivative_filter
        self.trapezoidal_integral = cfg.trapezoidal_integral
        self.telemetry = cfg.telemetry
        self._telemetry_failing = False

        self.reset()
        logger.debug("constructed %r", self)

    def reset(self):
        """Clear step memory, keeping the configuration."""
        self.previous_error = 0.0
        self.integral = 0.0
        self.derivative = 0.0

    def update(self, target: float, current: float, delta: Union[timedelta, float]) -> float:
        step = to_seconds(delta)
        if step <= 0:
            raise ValueError(f"time step must be positive, got {step}s")

        error = target - current
        # optional low-pass filter against noise in the error signal
        if self.error_filter != 0.0:
            error = (error * step + self.previous_error * self.error_filter) / (self.error_filter + step)

        self.integral = self.integral_limit.clamp(self._next_integral(error, step))
        self.derivative = self._next_derivative(error, step)
        # both terms above read the previous error, so it is replaced only now
        self.previous_error = error

        output = (self.proportional_gain * error
                  + self.integral_gain * self.integral
                  + self.derivative_gain * self.derivative)
        output = self.output_limit.clamp(output)

        if self.telemetry is not None:
            try:
                self.telemetry.observe(target, current, output)
                self._telemetry_failing = False
            except Exception:
                # full traceback only for the first failure of a run of failures
                if self._telemetry_failing:
                    logger.debug("telemetry still failing", exc_info=True)
                else:
                    logger.exception("telemetry failed to observe update")
                self._telemetry_failing = True
        return output

    def _next_integral(self, error: float, step: float) -> float:
        if self.trapezoidal_integral:
            return self.integral + step * (error + self.previous_error) / 2.0
        return self.integral + error * step

    def _next_derivative(self, error: float, step: float) -> float:
        if self.derivative_filter != 0.0:
            return ((error - self.previous_error) + self.derivative_filter * self.derivative) / (step + self.derivative_filter)
        return (error - self.previous_error) / step

    def __repr__(self):
        return (
            f"Controller(proportional_gain={self.proportional_gain}, integral_gain={self.integral_gain}, "
            f"derivative_gain={self.derivative_gain}, previous_error={self.previous_error}, "
            f"integral={self.integral}, derivative={self.derivative}, output_limit={self.output_limit}, "
            f"integral_limit={self.integral_limit}, error_filter={self.error_filter}, "
            f"derivative_filter={self.derivative_filter}, trapezoidal_integral={self.trapezoidal_integral})"
        )
