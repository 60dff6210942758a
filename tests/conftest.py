import pytest

from particle_system import ParticleSystem


@pytest.fixture
def make_system():
    """
    Builds an empty ParticleSystem and optionally places an exact arrangement.
    Unless overridden, drag is disabled and mass equals radius, which keeps
    expected values easy to compute by hand.
    """
    def _make(particles=(), bounds=(100.0, 100.0), **overrides):
        config = {'particle_count': 0, 'drag_factor': 1.0, 'mass_scale': 1.0}
        config.update(overrides)
        system = ParticleSystem(config=config, seed=0, bounds=bounds)
        if particles:
            system.place(particles)
        return system
    return _make


