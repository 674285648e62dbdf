import math

import pytest

from pid_control.errors import ConfigurationError
from pid_control.limit import Limit
from pid_control.options import (ControllerOptions, with_derivative_gain, with_error_filter,
                                 with_integral_gain, with_options, with_output_limit,
                                 with_proportional_gain, with_standard_form,
                                 with_trapezoidal_integral, with_ziegler_nichols)


def build(*opts):
    o = ControllerOptions()
    with_options(*opts)(o)
    return o


def test_defaults():
    o = ControllerOptions()
    assert (o.proportional_gain, o.integral_gain, o.derivative_gain) == (1.0, 0.0, 0.0)
    assert o.output_limit == Limit(-math.inf, math.inf)
    assert o.error_filter == 0.0 and o.derivative_filter == 0.0
    assert o.trapezoidal_integral is False
    assert o.telemetry is None


def test_standard_form_derives_gains_and_filters():
    o = build(with_standard_form(2.0, 1.0, 0.25))
    assert o.proportional_gain == 2.0
    assert o.integral_gain == 2.0
    assert o.derivative_gain == 0.5
    assert o.error_filter == 1 / 256
    assert o.derivative_filter == 1 / 32


def test_ziegler_nichols_delegates_to_standard_form():
    zn = build(with_ziegler_nichols(1.7, 2.0))
    standard = build(with_standard_form(0.6 * 1.7, 1.0, 0.25))
    assert zn == standard


def test_later_options_override_earlier():
    o = build(with_standard_form(2.0, 1.0, 0.25), with_error_filter(0.0), with_proportional_gain(3.0))
    assert o.error_filter == 0.0
    assert o.proportional_gain == 3.0
    assert o.derivative_filter == 1 / 32


def test_nested_bundles_apply_in_order():
    bundle = with_options(with_integral_gain(1.0), with_derivative_gain(0.5))
    o = build(bundle, with_integral_gain(4.0), with_output_limit(0.0, 20.0), with_trapezoidal_integral())
    assert o.integral_gain == 4.0
    assert o.derivative_gain == 0.5
    assert o.output_limit == Limit(0.0, 20.0)
    assert o.trapezoidal_integral is True


def test_negative_and_zero_gains_are_accepted():
    o = build(with_proportional_gain(-2.0), with_integral_gain(0.0), with_derivative_gain(-1e9))
    assert (o.proportional_gain, o.integral_gain, o.derivative_gain) == (-2.0, 0.0, -1e9)


def test_standard_form_rejects_zero_integral_time():
    with pytest.raises(ConfigurationError):
        build(with_standard_form(1.0, 0.0, 0.1))


def test_output_limit_bounds_are_floats():
    o = build(with_output_limit(-3, 3))
    assert isinstance(o.output_limit.lower, float)
    assert isinstance(o.output_limit.upper, float)
