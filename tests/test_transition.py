import datetime as dt
import pytest
from candela.config import Configuration
from candela.schedule import Phase
from candela.transition import TransitionEngine, interpolate

TZ = dt.timezone(dt.timedelta(hours=2))

def test_steady_phases():
    assert interpolate(Phase.DAY, 0.3, 6500, 1500) == 6500
    assert interpolate(Phase.NIGHT, 0.3, 6500, 1500) == 1500

def test_transition_phases():
    assert interpolate(Phase.TO_NIGHT, 0.5, 6500, 1500) == pytest.approx(4000)
    assert interpolate(Phase.TO_DAY, 0.25, 6500, 1500) == pytest.approx(2750)
    assert interpolate(Phase.TO_DAY, 0.0, 6500, 1500) == 1500
    assert interpolate(Phase.TO_DAY, 1.0, 6500, 1500) == 6500

@pytest.mark.parametrize("day,night", [(6500, 1500), (3000, 5000), (4000, 4000)])
def test_always_within_bounds(day, night):
    lo, hi = min(day, night), max(day, night)
    for phase in Phase:
        for i in range(101):
            v = interpolate(phase, i / 100, day, night)
            assert lo <= v <= hi

def test_overshoot_is_clamped():
    assert interpolate(Phase.TO_DAY, 1.0000001, 6500, 1500) == 6500
    assert interpolate(Phase.TO_NIGHT, -1e-9, 6500, 1500) == 6500

def test_engine_applies_easing():
    cfg = Configuration.model_validate({
        'mode': 'fixed',
        'schedule': {'wakeup': '07:00', 'bedtime': '22:00'},
        'transition': {'duration_minutes': 60, 'easing': 'ease_in'},
        'temperature': {'day': 6500, 'night': 1500},
    })
    reading = TransitionEngine(cfg).compute(dt.datetime(2024, 6, 21, 21, 30, tzinfo=TZ))
    assert reading.phase is Phase.TO_NIGHT
    assert reading.raw_progress == pytest.approx(0.5)
    assert reading.eased_progress == pytest.approx(0.25)
    assert reading.target == pytest.approx(5250)
