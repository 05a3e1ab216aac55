import pytest

from pupil_focus.config import ScoringConfig, TrackerConfig
from pupil_focus.geometry import EyeGeometry
from pupil_focus.scoring import (
    concentration_score,
    dilation_score,
    is_valid_sample,
    stability_score,
)


def test_dilation_score_breakpoints():
    assert dilation_score(1.0) == pytest.approx(40.0)
    assert dilation_score(1.15) == pytest.approx(50.0)
    assert dilation_score(1.3) == pytest.approx(60.0)
    assert dilation_score(2.5) == pytest.approx(60.0)
    assert dilation_score(0.85) == pytest.approx(20.0)
    assert dilation_score(0.7) == pytest.approx(0.0)
    assert dilation_score(0.2) == pytest.approx(0.0)


def test_dilation_score_is_monotonic_on_each_branch():
    above = [dilation_score(1.0 + i * 0.02) for i in range(40)]
    below = [dilation_score(1.0 - i * 0.02) for i in range(40)]
    assert above == sorted(above)
    assert below == sorted(below, reverse=True)


def test_dilation_score_uses_configured_breakpoints():
    cfg = ScoringConfig(dilation_cap_ratio=1.5, baseline_score=30.0, dilation_bonus=30.0)
    assert dilation_score(1.25, cfg) == pytest.approx(45.0)
    assert dilation_score(1.5, cfg) == pytest.approx(60.0)


def test_stability_score_penalizes_variability():
    assert stability_score(0.0, 2.0) == pytest.approx(20.0)
    assert stability_score(0.1, 2.0) == pytest.approx(16.0)
    assert stability_score(0.6, 2.0) == 0.0
    assert stability_score(0.1, 2.0) < stability_score(0.01, 2.0)


def test_zero_variability_at_baseline():
    result = concentration_score(4.0, 4.0, [4.0] * 30, TrackerConfig())
    assert result.dilation_score == pytest.approx(40.0)
    assert result.variability == 0.0
    assert result.raw_score == pytest.approx(60.0)


def test_dilation_contribution_capped_at_ratio_cap():
    capped = concentration_score(5.2, 4.0, [5.2] * 30, TrackerConfig())
    beyond = concentration_score(8.0, 4.0, [8.0] * 30, TrackerConfig())
    assert capped.dilation_score == pytest.approx(60.0)
    assert beyond.dilation_score == pytest.approx(60.0)
    assert beyond.raw_score == pytest.approx(capped.raw_score)


def test_focus_term_is_optional_and_bounded():
    cfg = TrackerConfig(scoring=ScoringConfig(stability_weight=40.0, focus_weight=40.0))
    result = concentration_score(5.2, 4.0, [5.2] * 30, cfg)
    assert result.focus_score == pytest.approx(40.0)
    assert result.raw_score == 100.0


def test_concentration_score_requires_baseline():
    with pytest.raises(ValueError):
        concentration_score(4.0, 0.0, [], TrackerConfig())


def test_validity_gate():
    cfg = TrackerConfig(min_pupil_diameter=2.0, max_pupil_diameter=8.0)
    open_eye = EyeGeometry(openness=0.3, is_open=True, pupil_diameter=4.0)
    closed_eye = EyeGeometry(openness=0.05, is_open=False, pupil_diameter=4.0)
    no_iris = EyeGeometry(openness=0.3, is_open=True, pupil_diameter=0.0)
    huge = EyeGeometry(openness=0.3, is_open=True, pupil_diameter=20.0)

    assert is_valid_sample(open_eye, open_eye, cfg)
    assert not is_valid_sample(open_eye, closed_eye, cfg)
    assert not is_valid_sample(no_iris, open_eye, cfg)
    assert not is_valid_sample(huge, huge, cfg)
