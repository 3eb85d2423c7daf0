import datetime as dt
import pytest
from candela.config import Configuration
from candela.schedule import Phase, PhaseResolver, Span, fixed_span, resolve_in_span
from candela.solar import sun_times

TZ = dt.timezone(dt.timedelta(hours=2))
DAY = dt.date(2024, 6, 21)

def fixed(wakeup='07:00', bedtime='22:00', minutes=60) -> PhaseResolver:
    cfg = Configuration.model_validate({
        'mode': 'fixed',
        'schedule': {'wakeup': wakeup, 'bedtime': bedtime},
        'transition': {'duration_minutes': minutes},
    })
    return PhaseResolver(cfg)

def auto(lat=48.516, lon=9.12, minutes=60) -> PhaseResolver:
    cfg = Configuration.model_validate({
        'mode': 'auto',
        'location': {'latitude': lat, 'longitude': lon},
        'transition': {'duration_minutes': minutes},
    })
    return PhaseResolver(cfg)

def at(h, m=0, day=DAY):
    return dt.datetime.combine(day, dt.time(h, m), tzinfo=TZ)

def test_fixed_boundaries():
    r = fixed()
    assert r.resolve(at(7)) == (Phase.TO_DAY, 0.0)
    phase, progress = r.resolve(at(7, 30))
    assert phase is Phase.TO_DAY and progress == pytest.approx(0.5)
    assert r.resolve(at(8))[0] is Phase.DAY
    assert r.resolve(at(12))[0] is Phase.DAY
    assert r.resolve(at(21)) == (Phase.TO_NIGHT, 0.0)
    phase, progress = r.resolve(at(21, 45))
    assert phase is Phase.TO_NIGHT and progress == pytest.approx(0.75)
    assert r.resolve(at(22))[0] is Phase.NIGHT
    assert r.resolve(at(3))[0] is Phase.NIGHT
    assert r.resolve(at(6, 59))[0] is Phase.NIGHT

def test_fixed_bedtime_past_midnight():
    r = fixed(wakeup='09:00', bedtime='01:00')
    nxt = DAY + dt.timedelta(days=1)
    assert r.resolve(at(0, 0, nxt)) == (Phase.TO_NIGHT, 0.0)
    phase, progress = r.resolve(at(0, 30, nxt))
    assert phase is Phase.TO_NIGHT and progress == pytest.approx(0.5)
    assert r.resolve(at(1, 0, nxt))[0] is Phase.NIGHT
    assert r.resolve(at(23, 0))[0] is Phase.DAY
    assert r.resolve(at(9))[0] is Phase.TO_DAY

def test_overlapping_windows_are_clamped():
    r = fixed(wakeup='10:00', bedtime='11:00', minutes=60)
    phase, progress = r.resolve(at(10, 15))
    assert phase is Phase.TO_DAY and progress == pytest.approx(0.5)
    assert r.resolve(at(10, 30)) == (Phase.TO_NIGHT, 0.0)
    phase, progress = r.resolve(at(10, 45))
    assert phase is Phase.TO_NIGHT and progress == pytest.approx(0.5)

def test_progress_always_in_range_for_degenerate_schedule():
    r = fixed(wakeup='23:50', bedtime='00:10', minutes=240)
    t = at(0)
    for _ in range(48 * 12):
        phase, progress = r.resolve(t)
        assert isinstance(phase, Phase)
        assert 0.0 <= progress <= 1.0
        t += dt.timedelta(minutes=5)

def test_auto_sunrise_starts_to_day():
    r = auto()
    st = sun_times(48.516, 9.12, DAY, TZ)
    assert r.resolve(st.sunrise) == (Phase.TO_DAY, 0.0)
    assert r.resolve(st.sunrise + dt.timedelta(minutes=60))[0] is Phase.DAY

def test_auto_sunset_side():
    r = auto()
    st = sun_times(48.516, 9.12, DAY, TZ)
    phase, progress = r.resolve(st.sunset - dt.timedelta(minutes=30))
    assert phase is Phase.TO_NIGHT and progress == pytest.approx(0.5)
    assert r.resolve(st.sunset)[0] is Phase.NIGHT
    assert r.resolve(st.sunset + dt.timedelta(hours=2))[0] is Phase.NIGHT
    midday = st.sunrise + (st.sunset - st.sunrise) / 2
    assert r.resolve(midday) == (Phase.DAY, 1.0)

def test_auto_polar_day_and_night():
    r = auto(lat=78.22, lon=15.65)
    assert r.resolve(at(1)) == (Phase.DAY, 1.0)
    assert r.resolve(at(12, 0, dt.date(2024, 12, 21))) == (Phase.NIGHT, 1.0)

def test_auto_far_longitude_stays_consistent():
    # events fall on the "wrong" local date for this offset
    r = auto(lat=-36.85, lon=174.76)
    t = at(0)
    phases = set()
    for _ in range(48 * 6):
        phase, progress = r.resolve(t)
        phases.add(phase)
        assert 0.0 <= progress <= 1.0
        t += dt.timedelta(minutes=10)
    assert phases == set(Phase)

def test_naive_time_is_treated_as_local():
    r = fixed()
    assert r.resolve(dt.datetime(2024, 6, 21, 12, 0))[0] is Phase.DAY

def test_resolve_in_span_zero_length():
    t = at(12)
    assert resolve_in_span(t, Span(t, t), dt.timedelta(minutes=30)) == (Phase.DAY, 1.0)

def test_fixed_span_wraps():
    s = fixed_span(DAY, dt.time(20), dt.time(2), TZ)
    assert s.set - s.rise == dt.timedelta(hours=6)
