"""
Tests for semi-implicit integration and SOI transitions.
"""
import logging
import math
import pytest

from conic_sim.core.frames import dot, norm, sub
from conic_sim.core.propagator import (
    TransitionEvent,
    acceleration,
    apply_bounds,
    check_transitions,
    derive_captured_conic,
    integrate,
    step,
)
from conic_sim.objects.body import Primary, SimulatedBody
from conic_sim.objects.regime import Captured, Free

# G = 1: mu of the planet is 1000, a moon on a radius-10 circle has period 2π
PLANET_MASS = 1000.0
MOON_MASS = 10.0


@pytest.fixture
def primary():
    return Primary(primary_id="planet", mass=PLANET_MASS, gravitational_constant=1.0)


@pytest.fixture
def moon(primary):
    return SimulatedBody.launch(
        "moon", "Moon", (10.0, 0.0, 0.0), (0.0, 10.0, 0.0), primary,
        mass=MOON_MASS, soi_radius=1.0,
    )


@pytest.fixture
def approaching_sat(primary):
    # half a unit outside the moon's orbit, slower than the moon
    return SimulatedBody.launch("sat", "Probe", (10.5, 0.0, 0.0), (0.0, 9.0, 0.0), primary)


def captured_sat(primary, moon):
    snap = moon.snapshot()
    pos, vel = (10.3, 0.0, 0.0), (0.0, 9.5, 0.0)
    conic, record = derive_captured_conic(pos, vel, snap, primary, 0.0)
    return SimulatedBody("sat", "Probe", pos, vel, conic, regime=Captured(record))


class TestIntegrate:
    def test_semi_implicit_order(self, primary):
        body = SimulatedBody.launch("b", "Body", (10.0, 0.0, 0.0), (0.0, 10.0, 0.0), primary)
        integrate(body, 0.1, 0.1)

        assert body.position == pytest.approx((10.0, 1.0, 0.0))
        # velocity update uses the NEW position
        r = math.sqrt(101.0)
        k = -PLANET_MASS / r**3
        assert body.velocity == pytest.approx((0.1 * k * 10.0, 10.0 + 0.1 * k * 1.0, 0.0))

    def test_circular_orbit_radius_stable(self, primary):
        body = SimulatedBody.launch("b", "Body", (10.0, 0.0, 0.0), (0.0, 10.0, 0.0), primary)
        dt = 0.001
        t = 0.0
        for _ in range(int(2 * math.pi / dt)):
            t += dt
            integrate(body, dt, t)
            assert norm(body.position) == pytest.approx(10.0, abs=2e-2)

    def test_captured_acceleration_relative_to_secondary(self, primary, moon):
        sat = captured_sat(primary, moon)
        t = 0.2
        center = moon.conic.position_at_time(t)
        pos = (center[0] + 0.4, center[1], center[2])
        a = acceleration(sat, pos, t)
        frame = moon.conic.gravitational_acceleration(center)
        pull = sub(a, frame)
        assert norm(pull) == pytest.approx(MOON_MASS / 0.4**2)
        assert pull[0] < 0


class TestSoiEntry:
    def test_step_enters_moon_soi(self, primary, moon, approaching_sat):
        event = step(approaching_sat, 0.01, 0.01, (moon.snapshot(),), primary)

        assert event == TransitionEvent("sat", "enter", "moon", 0.01)
        assert isinstance(approaching_sat.regime, Captured)
        record = approaching_sat.transition
        assert record.entry_time == 0.01
        assert record.primary_id == "moon"
        assert record.primary_conic is moon.conic
        assert record.soi_radius == 1.0
        assert approaching_sat.conic.primary_mass == MOON_MASS
        assert approaching_sat.conic.epoch == 0.01

    def test_captured_conic_is_relative_to_moon(self, primary, moon, approaching_sat):
        step(approaching_sat, 0.01, 0.01, (moon.snapshot(),), primary)
        rel = sub(approaching_sat.position, moon.conic.position_at_time(0.01))
        assert approaching_sat.conic.reference_position == pytest.approx(rel)
        assert norm(rel) < 1.0

    def test_far_body_stays_free(self, primary, moon):
        sat = SimulatedBody.launch("sat", "Probe", (0.0, 5.0, 0.0), (-14.0, 0.0, 0.0), primary)
        conic = sat.conic
        assert step(sat, 0.01, 0.01, (moon.snapshot(),), primary) is None
        assert isinstance(sat.regime, Free)
        assert sat.conic is conic

    def test_body_never_captured_by_itself(self, primary, moon):
        assert check_transitions(moon, 0.0, (moon.snapshot(),), primary) is None
        assert not moon.is_captured


class TestSoiExit:
    def test_exit_when_beyond_soi(self, primary, moon):
        sat = captured_sat(primary, moon)
        sat.position = (15.0, 0.0, 0.0)

        event = check_transitions(sat, 0.0, (moon.snapshot(),), primary)

        assert event == TransitionEvent("sat", "exit", "moon", 0.0)
        assert isinstance(sat.regime, Free)
        assert sat.transition is None
        assert sat.conic.primary_mass == PLANET_MASS
        assert sat.conic.reference_position == (15.0, 0.0, 0.0)

    def test_captured_body_inside_soi_stays(self, primary, moon):
        sat = captured_sat(primary, moon)
        assert check_transitions(sat, 0.0, (), primary) is None
        assert sat.is_captured

    def test_captured_body_ignores_other_secondaries(self, primary, moon):
        other = SimulatedBody.launch(
            "moon-2", "Other", (10.3, 0.0, 0.0), (0.0, 10.0, 0.0), primary,
            mass=5.0, soi_radius=3.0,
        )
        sat = captured_sat(primary, moon)
        assert check_transitions(sat, 0.0, (other.snapshot(),), primary) is None
        assert sat.transition.primary_id == "moon"


class TestBounds:
    def test_mirror_when_out_of_bounds(self, primary):
        body = SimulatedBody.launch("b", "Body", (25.0, 1.0, 0.0), (1.0, 2.0, 3.0), primary)
        assert apply_bounds(body, primary, 4.0)
        assert body.position == (-25.0, 1.0, 0.0)
        assert body.velocity == (1.0, -2.0, -3.0)
        assert body.conic.reference_position == (-25.0, 1.0, 0.0)
        assert body.conic.epoch == 4.0

    def test_mirror_axis_configurable(self):
        primary = Primary(primary_id="planet", mass=PLANET_MASS, gravitational_constant=1.0, mirror_axis=2)
        body = SimulatedBody.launch("b", "Body", (0.0, 1.0, 30.0), (1.0, 2.0, 3.0), primary)
        assert apply_bounds(body, primary, 0.0)
        assert body.position == (0.0, 1.0, -30.0)
        assert body.velocity == (-1.0, -2.0, 3.0)

    def test_inside_bounds_untouched(self, primary):
        body = SimulatedBody.launch("b", "Body", (5.0, 0.0, 0.0), (0.0, 14.0, 0.0), primary)
        conic = body.conic
        assert not apply_bounds(body, primary, 0.0)
        assert body.position == (5.0, 0.0, 0.0)
        assert body.conic is conic

    def test_mirror_reverses_radial_motion(self, primary):
        body = SimulatedBody.launch("b", "Body", (25.0, 1.0, 0.0), (1.0, 2.0, 3.0), primary)
        assert dot(body.position, body.velocity) == 27.0
        apply_bounds(body, primary, 0.0)
        assert dot(body.position, body.velocity) == -27.0
        assert norm(body.velocity) == pytest.approx(math.sqrt(14.0))

    def test_escaping_body_brought_back(self):
        # nearly free flight: without re-injection this body never returns
        primary = Primary(primary_id="planet", mass=1.0, gravitational_constant=1.0, bounds_radius=20.0)
        body = SimulatedBody.launch("b", "Body", (19.5, 1.0, 0.0), (2.0, 0.5, 0.0), primary)
        dt = 0.5
        t = 0.0
        out_of_bounds = []
        for _ in range(200):
            t += dt
            step(body, dt, t, (), primary)
            out = norm(body.position) > primary.bounds_radius
            if out:
                assert dot(body.position, body.velocity) < 0.0
            out_of_bounds.append(out)

        assert out_of_bounds[0]
        assert not any(a and b for a, b in zip(out_of_bounds, out_of_bounds[1:]))
        assert sum(out_of_bounds) < 20
        assert norm(body.position) <= primary.bounds_radius + 1.5

    def test_mirror_keeps_captured_regime(self, primary, moon):
        sat = captured_sat(primary, moon)
        sat.position = (21.0, 0.0, 0.0)
        assert apply_bounds(sat, primary, 0.0)
        assert sat.is_captured
        assert sat.conic.primary_mass == MOON_MASS


class TestLogging:
    def test_entry_logged_at_info(self, primary, moon, approaching_sat, caplog):
        with caplog.at_level(logging.INFO, logger="conic_sim.core.propagator"):
            step(approaching_sat, 0.01, 0.01, (moon.snapshot(),), primary)
        assert "entered SOI of moon" in caplog.text

    def test_mirror_logged_as_warning(self, primary, caplog):
        body = SimulatedBody.launch("b", "Body", (25.0, 1.0, 0.0), (1.0, 2.0, 3.0), primary)
        with caplog.at_level(logging.WARNING, logger="conic_sim.core.propagator"):
            apply_bounds(body, primary, 1.0)
        assert any(r.levelno == logging.WARNING for r in caplog.records)
