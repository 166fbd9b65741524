import pytest

from effort_estimation.accuracy import calculate_mae, calculate_r2_score, calculate_rmse
from effort_estimation.schema import AccuracyDataPoint


def points(*pairs):
    return [AccuracyDataPoint(estimated=e, actual=a) for e, a in pairs]


SAMPLE = points((10, 12), (20, 18), (30, 33))


def test_empty_sample_has_no_metrics():
    assert calculate_mae([]) is None
    assert calculate_rmse([]) is None
    assert calculate_r2_score([]) is None


def test_metrics_on_sample():
    assert calculate_mae(SAMPLE) == 2.33
    assert calculate_rmse(SAMPLE) == 2.38
    assert calculate_r2_score(SAMPLE) == 0.93


def test_order_of_points_does_not_matter():
    shuffled = list(reversed(SAMPLE))
    assert calculate_mae(shuffled) == calculate_mae(SAMPLE)
    assert calculate_rmse(shuffled) == calculate_rmse(SAMPLE)
    assert calculate_r2_score(shuffled) == calculate_r2_score(SAMPLE)


def test_perfect_estimates_are_zero_error_not_missing():
    perfect = points((5, 5), (7, 7))
    assert calculate_mae(perfect) == 0
    assert calculate_rmse(perfect) == 0
    assert calculate_r2_score(perfect) == 1.0


def test_r2_single_exact_point_is_perfect():
    assert calculate_r2_score(points((5, 5))) == 1.00


def test_r2_single_missed_point_is_undefined():
    assert calculate_r2_score(points((3, 5))) is None


def test_r2_constant_actuals_with_identical_decimals():
    # 0.1 * 3 / 3 is not exactly 0.1 in binary floating point
    sample = points((0.1, 0.1), (0.1, 0.1), (0.1, 0.1))
    assert calculate_r2_score(sample) == 1.0
    assert calculate_r2_score(points((0.2, 0.1), (0.1, 0.1), (0.1, 0.1))) is None


def test_r2_can_be_negative_for_poor_fit():
    assert calculate_r2_score(points((5, 1), (5, 3))) == -9.0


def test_r2_minimum_sample_size_policy():
    one = points((5, 5))
    assert calculate_r2_score(one, min_samples=2) is None
    assert calculate_r2_score(SAMPLE, min_samples=2) == 0.93
    assert calculate_r2_score(SAMPLE, min_samples=4) is None


def test_duplicates_are_counted():
    doubled = SAMPLE + SAMPLE
    assert calculate_mae(doubled) == calculate_mae(SAMPLE)
    assert calculate_rmse(doubled) == pytest.approx(calculate_rmse(SAMPLE))
