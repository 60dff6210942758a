# particle.py

import logging
from collections import namedtuple

import numpy as np

from constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

# Read-only records handed to the renderer and to debugging/test code.
# Positions and velocities are plain (x, y) float tuples, never views into the store.
ParticleView = namedtuple('ParticleView', ['position', 'radius', 'color'])
Particle = namedtuple('Particle', ['id', 'position', 'velocity', 'radius', 'mass', 'color'])


class ParticleStore:
    """
    Holds the bounds and every particle of the canvas as a structure of NumPy
    arrays. Row i of each array describes the i-th particle in insertion order.

    Data Contract:
    - Inputs: bounds (tuple) - The (width, height) of the simulation area.
    - Outputs: None. Populated by seed().
    - Side Effects: seed() discards the previous population entirely.
    - Invariants:
        - positions and velocities have shape (N, 2); radii, masses and ids
          have shape (N,); len(colors) == N.
        - radii > 0 and masses > 0 for every particle.
        - ids are never reused for the lifetime of the store.
    """
    def __init__(self, bounds: tuple):
        self.bounds = np.array(bounds, dtype=np.float64)
        self.positions = np.empty((0, 2), dtype=np.float64)
        self.velocities = np.empty((0, 2), dtype=np.float64)
        self.radii = np.empty(0, dtype=np.float64)
        self.masses = np.empty(0, dtype=np.float64)
        self.ids = np.empty(0, dtype=np.int64)
        self.colors = []
        self._next_id = 0

    def __len__(self):
        return self.positions.shape[0]

    @property
    def width(self) -> float:
        return float(self.bounds[0])

    @property
    def height(self) -> float:
        return float(self.bounds[1])

    def seed(self, count: int, rng: np.random.Generator, config: dict):
        """
        Replaces the population with `count` freshly randomized particles.

        Radii are uniform in config['radius_range'], positions uniform in
        [radius, bound - radius] on each axis and velocity components uniform
        in [-initial_speed, initial_speed]. Mass is radius * mass_scale.
        An axis narrower than a particle's diameter gets the particle centered.
        """
        count = max(0, int(count))
        r_min, r_max = config['radius_range']

        radii = rng.uniform(r_min, r_max, count)
        # Free room on each axis once the particle's radius is kept off both walls
        room = np.clip(self.bounds[np.newaxis, :] - 2.0 * radii[:, np.newaxis], 0.0, None)
        positions = rng.random((count, 2)) * room + radii[:, np.newaxis]
        cramped = room == 0.0
        if np.any(cramped):
            centers = np.broadcast_to(self.bounds / 2.0, positions.shape)
            positions[cramped] = centers[cramped]
            logger.warning(f"{int(np.any(cramped, axis=1).sum())} particle(s) are larger than the "
                           f"{self.width:.0f}x{self.height:.0f} area and were centered.")

        speed = config['initial_speed']
        velocities = rng.uniform(-speed, speed, (count, 2))
        palette = config['color_palette']
        color_indices = rng.integers(0, len(palette), count)

        self.positions = positions
        self.velocities = velocities
        self.radii = radii
        self.masses = radii * config['mass_scale']
        self.ids = np.arange(self._next_id, self._next_id + count, dtype=np.int64)
        self.colors = [palette[k] for k in color_indices]
        self._next_id += count

    def view(self, index: int) -> ParticleView:
        x, y = self.positions[index]
        return ParticleView((float(x), float(y)), float(self.radii[index]), self.colors[index])

    def record(self, index: int) -> Particle:
        x, y = self.positions[index]
        vx, vy = self.velocities[index]
        return Particle(
            int(self.ids[index]),
            (float(x), float(y)),
            (float(vx), float(vy)),
            float(self.radii[index]),
            float(self.masses[index]),
            self.colors[index],
        )

    def place(self, particles, mass_scale: float):
        """
        Replaces the population with explicitly given particles.

        `particles` is an iterable of dicts with 'position', 'velocity',
        'radius' and optionally 'color'. Hosts use it to restore a scene and
        tests use it to build exact arrangements. Entries with a non-positive
        radius are dropped so the store stays valid.
        """
        particles = list(particles)
        valid = [p for p in particles if p['radius'] > 0]
        if len(valid) != len(particles):
            logger.warning(f"Dropped {len(particles) - len(valid)} particle(s) with a non-positive radius.")
        count = len(valid)
        self.positions = np.array([p['position'] for p in valid], dtype=np.float64).reshape(count, 2)
        self.velocities = np.array([p['velocity'] for p in valid], dtype=np.float64).reshape(count, 2)
        self.radii = np.array([p['radius'] for p in valid], dtype=np.float64).reshape(count)
        self.masses = self.radii * mass_scale
        self.ids = np.arange(self._next_id, self._next_id + count, dtype=np.int64)
        self.colors = [p.get('color', '#ffffff') for p in valid]
        self._next_id += count
