import numpy as np
import pytest

from sensible_sampling.util import (
    element_labels,
    infer_param_names,
    level_to_conf_int,
    precision_to_sd,
    precision_to_variance,
    sd_to_precision,
    uncertainty_to_string,
    variance_to_precision,
)


@pytest.mark.parametrize(
    "x, err, precision, expected",
    [
        (0.0, 1e-4, 1, "0(1)e-4"),
        (12.34567, 0.00123, 1, "12.346(1)"),
        (12.34567, 0.00123, 2, "12.3457(12)"),
        (-0.123456, 0.000123, 2, "-0.12346(12)"),
        (-0.0000123456, 0.0000001234, 1, "-1.23(1)e-5"),
        (1.0, 0.0, 2, "1(0)"),
        (float("nan"), 1.0, 1, "NaN"),
        (1.0, float("inf"), 1, "inf"),
        (1.0, -0.1, 1, "1.0(1)"),
        (1.2345, 0.067, "auto", "1.23(7)"),
    ],
)
def test_uncertainty_to_string(x, err, precision, expected):
    assert uncertainty_to_string(x, err, precision) == expected


def test_precision_conversions_are_inverse():
    assert sd_to_precision(4.0) == pytest.approx(1.0 / 16.0)
    assert variance_to_precision(16.0) == pytest.approx(1.0 / 16.0)
    assert precision_to_sd(1.0 / 16.0) == pytest.approx(4.0)
    assert precision_to_variance(0.25) == pytest.approx(4.0)
    assert isinstance(sd_to_precision(2.0), float)

    arr = sd_to_precision(np.array([1.0, 2.0]))
    np.testing.assert_allclose(arr, [1.0, 0.25])


@pytest.mark.parametrize(
    "fn", [sd_to_precision, variance_to_precision, precision_to_sd, precision_to_variance]
)
def test_precision_conversions_reject_non_positive(fn):
    with pytest.raises(ValueError):
        fn(0.0)
    with pytest.raises(ValueError):
        fn(np.array([1.0, -1.0]))


def test_element_labels():
    assert element_labels("alpha", ()) == ["alpha"]
    assert element_labels("b", (3,)) == ["b[0]", "b[1]", "b[2]"]
    assert element_labels("m", (2, 2)) == ["m[0,0]", "m[0,1]", "m[1,0]", "m[1,1]"]


def test_level_to_conf_int_two_sigma():
    lo, hi = level_to_conf_int(2.0)
    assert lo == pytest.approx(0.02275, abs=1e-4)
    assert hi == pytest.approx(1 - 0.02275, abs=1e-4)


def test_infer_param_names():
    def line(x, alpha, beta):
        return alpha + beta * x

    assert infer_param_names(line) == ("alpha", "beta")

    def bad(x, *args):
        return x

    with pytest.raises(TypeError):
        infer_param_names(bad)
