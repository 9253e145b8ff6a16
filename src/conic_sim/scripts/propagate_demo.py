import math

from conic_sim.objects.body import Primary, SimulatedBody
from conic_sim.core.propagator import step

# mu = 398600 with G = 1
primary = Primary(primary_id="earth", mass=398600.0, gravitational_constant=1.0, bounds_radius=1.0e6)

sat = SimulatedBody.launch(
    "SAT-001", "DemoSat",
    position=(1000.0, 5000.0, 7000.0),
    velocity=(3.0, 4.0, 5.0),
    primary=primary,
)

for key, value in sat.conic.describe().items():
    print(f"{key:>9}: {value}")

t = 0.0
dt = 0.5
for _ in range(4):
    for _ in range(1200):
        t += dt
        step(sat, dt, t, (), primary)
    nu = sat.conic.true_anomaly_at_position(sat.position)
    print(f"t={t:8.1f}  r={sat.position}  nu={math.degrees(nu):.2f} deg")
