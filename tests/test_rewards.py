import pytest

from advocat.rewards import (
    FLOOR_SAVED,
    Mode,
    clarity_fraction,
    estimate_credits_saved,
    multiplier,
    pity_credits,
)


@pytest.mark.parametrize("raw,length,mode,expected", [
    (1000, 50, Mode.QUICK, 500),     # vague: 1.5x
    (1000, 0, Mode.QUICK, 500),
    (1000, 125, Mode.QUICK, 100),    # halfway: 1.1x
    (1000, 200, Mode.QUICK, FLOOR_SAVED),  # concise: 0.7x is a loss, floored
    (1000, 50, Mode.DEEP, 2000),     # vague deep: 3.0x
    (1000, 200, Mode.DEEP, 200),     # concise deep: 1.2x
    (0, 80, Mode.DEEP, FLOOR_SAVED),
])
def test_estimate_credits_saved(raw, length, mode, expected):
    assert estimate_credits_saved(raw, length, mode) == expected


def test_rounds_half_up():
    # 21 * 1.5 - 21 = 10.5
    assert estimate_credits_saved(21, 10, Mode.QUICK) == 11


def test_clarity_fraction_is_clamped():
    assert clarity_fraction(-5) == 0.0
    assert clarity_fraction(50) == 0.0
    assert clarity_fraction(200) == 1.0
    assert clarity_fraction(10_000) == 1.0


def test_multiplier_bounds():
    assert multiplier(0, Mode.QUICK) == pytest.approx(1.5)
    assert multiplier(500, Mode.QUICK) == pytest.approx(0.7)
    assert multiplier(0, "deep") == pytest.approx(3.0)


def test_longer_input_never_earns_more():
    previous = None
    for length in range(0, 400, 7):
        value = estimate_credits_saved(800, length, Mode.DEEP)
        if previous is not None:
            assert value <= previous
        previous = value


def test_deep_earns_at_least_quick():
    for raw in (0, 50, 400, 3000):
        for length in (0, 60, 150, 300):
            assert estimate_credits_saved(raw, length, Mode.DEEP) >= estimate_credits_saved(raw, length, Mode.QUICK)


def test_floor_applies_to_every_success():
    assert all(estimate_credits_saved(raw, 1000, Mode.QUICK) >= FLOOR_SAVED for raw in range(0, 2000, 97))


def test_pity_credits():
    assert pity_credits(Mode.QUICK) == 10
    assert pity_credits("deep") == 20
    with pytest.raises(ValueError):
        pity_credits("thorough")
