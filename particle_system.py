# particle_system.py

import math
import logging

import numba
import numpy as np

import constants
from particle import ParticleStore
from settings import build_simulation_config

logger = logging.getLogger(constants.LOGGER_NAME)

# --- JIT-Compiled Physics Functions ---
# These functions are compiled to machine code by Numba. They are kept outside
# the ParticleSystem class and operate only on NumPy arrays and scalars, as
# required by Numba's nopython mode. All of them modify the arrays in place.

@numba.jit(nopython=True)
def _integrate_jit(positions, velocities, drag):
    """Moves every particle by its velocity, then applies drag (unit time step)."""
    for i in range(positions.shape[0]):
        positions[i, 0] += velocities[i, 0]
        positions[i, 1] += velocities[i, 1]
        velocities[i, 0] *= drag
        velocities[i, 1] *= drag

@numba.jit(nopython=True)
def _fallback_normal_jit(index):
    """Normal used for coincident centers, chosen by the parity of the first particle's index."""
    if index % 2 == 0:
        return 1.0, 0.0
    return 0.0, 1.0

@numba.jit(nopython=True)
def _resolve_collisions_jit(positions, velocities, masses, radii):
    """
    Pairwise elastic collision detection and resolution.

    Pairs (i, j) with i < j are visited in index order. A pair whose
    relative velocity along the normal is >= 0 is already separating and is
    left alone, even if it overlaps. Returns the number of pairs resolved.
    """
    resolved = 0
    num_particles = positions.shape[0]
    for i in range(num_particles):
        for j in range(i + 1, num_particles):
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            distance = math.sqrt(dx * dx + dy * dy)
            min_distance = radii[i] + radii[j]
            if distance >= min_distance:
                continue

            if distance == 0.0:
                nx, ny = _fallback_normal_jit(i)
            else:
                nx = dx / distance
                ny = dy / distance

            # Relative velocity along the normal
            dvx = velocities[j, 0] - velocities[i, 0]
            dvy = velocities[j, 1] - velocities[i, 1]
            velocity_along_normal = dvx * nx + dvy * ny
            if velocity_along_normal >= 0.0:
                continue

            # Two-body elastic impulse; momentum m_i*v_i + m_j*v_j is unchanged
            m_i = masses[i]
            m_j = masses[j]
            impulse = 2.0 * velocity_along_normal / (m_i + m_j)
            velocities[i, 0] += impulse * m_j * nx
            velocities[i, 1] += impulse * m_j * ny
            velocities[j, 0] -= impulse * m_i * nx
            velocities[j, 1] -= impulse * m_i * ny

            # Equal split of the penetration, regardless of mass
            overlap = (min_distance - distance) / 2.0
            positions[i, 0] -= overlap * nx
            positions[i, 1] -= overlap * ny
            positions[j, 0] += overlap * nx
            positions[j, 1] += overlap * ny
            resolved += 1
    return resolved

@numba.jit(nopython=True)
def _reflect_axis_jit(positions, velocities, i, axis, r, bound, damping):
    """Clamps one coordinate into [r, bound - r] and reflects its velocity. Returns 1 on contact."""
    if 2.0 * r > bound:
        # Wider than the area: pinned at the center of this axis
        if positions[i, axis] != bound / 2.0:
            positions[i, axis] = bound / 2.0
            velocities[i, axis] = -velocities[i, axis] * damping
            return 1
        return 0
    if positions[i, axis] - r < 0.0:
        positions[i, axis] = r
        velocities[i, axis] = -velocities[i, axis] * damping
        return 1
    if positions[i, axis] + r > bound:
        positions[i, axis] = bound - r
        velocities[i, axis] = -velocities[i, axis] * damping
        return 1
    return 0

@numba.jit(nopython=True)
def _handle_boundaries_jit(positions, velocities, radii, width, height, damping):
    """
    Clamps particles inside the area and reflects the velocity component of
    every wall they touched. Axes are handled independently. A particle wider
    than the area on an axis is held at that axis' center. Returns the number
    of wall contacts.
    """
    contacts = 0
    for i in range(positions.shape[0]):
        r = radii[i]
        contacts += _reflect_axis_jit(positions, velocities, i, 0, r, width, damping)
        contacts += _reflect_axis_jit(positions, velocities, i, 1, r, height, damping)
    return contacts

@numba.jit(nopython=True)
def _apply_force_jit(positions, velocities, point_x, point_y, influence_radius, strength):
    """
    Pushes particles within influence_radius of the point radially outward.
    The push falls off linearly from full strength at the point to zero at
    the edge of the radius. Returns the number of particles affected.
    """
    affected = 0
    for i in range(positions.shape[0]):
        dx = positions[i, 0] - point_x
        dy = positions[i, 1] - point_y
        distance = math.sqrt(dx * dx + dy * dy)
        if distance < influence_radius:
            falloff = (influence_radius - distance) / influence_radius
            angle = math.atan2(dy, dx)
            velocities[i, 0] += math.cos(angle) * falloff * strength
            velocities[i, 1] += math.sin(angle) * falloff * strength
            affected += 1
    return affected


class ParticleSystem:
    """
    The physics canvas: owns the particle store and advances it one tick at a
    time.

    Data Contract:
    - Inputs:
        - config (dict): The 'simulation' section of the config file. Partial
          or out-of-range sections are completed and clamped.
        - rng (np.random.Generator): The master seeded random number generator.
        - bounds (tuple): The (width, height) of the simulation area.
        - seed (int, optional): Replaces rng with a fresh generator seeded from it.
    - Outputs: None. This class modifies its internal state; renderers read
      snapshot().
    - Side Effects: Manages the lifecycle of all particle data.
    - Invariants:
        - After step(), every particle center lies within
          [radius, width - radius] x [radius, height - radius].
        - The population only changes through init() and resize().
        - No method raises on degenerate input; it is clamped or ignored.
    - Concurrency: Not thread-safe. The host must serialize step(),
      apply_force_at(), init() and resize().
    """
    def __init__(self, config: dict = None, rng: np.random.Generator = None,
                 bounds: tuple = (constants.WIDTH, constants.HEIGHT), seed: int = None):
        self.config = build_simulation_config(config)
        if seed is not None:
            rng = np.random.default_rng(seed)
        self.rng = rng if rng is not None else np.random.default_rng()

        if not self._valid_bounds(bounds):
            logger.warning(f"Invalid bounds {bounds}. Falling back to {constants.WIDTH}x{constants.HEIGHT}.")
            bounds = (constants.WIDTH, constants.HEIGHT)
        self.store = ParticleStore(bounds)
        self.particle_count = 0
        self.tick = 0

        # --- Per-step contact tracking for logging ---
        self.last_collision_count = 0
        self.last_wall_contacts = 0

        self.init(self.config['particle_count'], bounds)

    @staticmethod
    def _valid_bounds(bounds) -> bool:
        return bounds is not None and len(bounds) == 2 and bounds[0] > 0 and bounds[1] > 0

    def __len__(self):
        return len(self.store)

    @property
    def bounds(self) -> tuple:
        return (self.store.width, self.store.height)

    def init(self, count: int, bounds: tuple = None, seed: int = None, config: dict = None):
        """
        Discards every particle and seeds `count` new ones.

        A negative count is treated as 0. Invalid bounds keep the current
        bounds. Passing a seed makes the new population (and everything that
        follows from it) reproducible. A config section, if given, is merged
        over the current options before seeding.
        """
        if config is not None:
            merged = dict(self.config)
            merged.update(config)
            self.config = build_simulation_config(merged)
        if count < 0:
            logger.warning(f"Particle count {count} is negative. Using 0.")
        count = max(0, int(count))
        if bounds is not None:
            if self._valid_bounds(bounds):
                self.store.bounds = np.array(bounds, dtype=np.float64)
            else:
                logger.warning(f"Invalid bounds {bounds}. Keeping {self.store.width}x{self.store.height}.")
        if seed is not None:
            self.rng = np.random.default_rng(seed)

        self.particle_count = count
        self.store.seed(count, self.rng, self.config)
        self.tick = 0
        self.last_collision_count = 0
        self.last_wall_contacts = 0
        logger.info(f"Seeded {count} particles in a {self.store.width:.0f}x{self.store.height:.0f} area.")

    def resize(self, bounds: tuple) -> bool:
        """
        Adopts new bounds and re-seeds with the current particle count, since
        old positions may lie outside the new area. A width or height <= 0 is
        ignored. Returns True if the simulation was re-seeded.
        """
        if not self._valid_bounds(bounds):
            logger.debug(f"Ignoring resize to degenerate bounds {bounds}.")
            return False
        logger.info(f"Resizing simulation area to {bounds[0]}x{bounds[1]}.")
        self.init(self.particle_count, bounds)
        return True

    def place(self, particles):
        """Replaces the population with an explicit arrangement (see ParticleStore.place)."""
        self.store.place(particles, self.config['mass_scale'])
        self.particle_count = len(self.store)

    # --- Pipeline stages ---

    def integrate(self):
        """Integrator: position += velocity, then velocity *= drag."""
        _integrate_jit(self.store.positions, self.store.velocities, self.config['drag_factor'])

    def handle_collisions(self) -> int:
        """
        Detects and resolves circle-circle overlaps with an O(n^2) pairwise
        scan in insertion order. A uniform grid would bound the number of
        pairs for large populations without changing the resolution math.
        """
        self.last_collision_count = _resolve_collisions_jit(
            self.store.positions,
            self.store.velocities,
            self.store.masses,
            self.store.radii
        )
        return self.last_collision_count

    def check_boundary_collisions(self) -> int:
        """Reflects particles off the four walls with energy loss."""
        self.last_wall_contacts = _handle_boundaries_jit(
            self.store.positions,
            self.store.velocities,
            self.store.radii,
            self.store.width,
            self.store.height,
            self.config['wall_damping_factor']
        )
        return self.last_wall_contacts

    def step(self):
        """
        Advances the simulation by exactly one tick: integration, then
        collisions, then walls. The pointer force is not part of the step; the
        host applies it on input events.
        """
        self.integrate()
        self.handle_collisions()
        self.check_boundary_collisions()
        self.tick += 1

    def apply_force_at(self, point, influence_radius: float = None, strength: float = None) -> int:
        """
        Adds a radial push to every particle closer than influence_radius to
        `point`. Velocities are not capped, so hosts that call this at a high
        rate with a large strength should limit the strength themselves.
        Returns the number of particles pushed.
        """
        if influence_radius is None:
            influence_radius = self.config['force_influence_radius']
        if strength is None:
            strength = self.config['force_strength']
        if influence_radius <= 0:
            logger.debug(f"Ignoring force with non-positive influence radius {influence_radius}.")
            return 0

        affected = _apply_force_jit(
            self.store.positions,
            self.store.velocities,
            float(point[0]),
            float(point[1]),
            float(influence_radius),
            float(strength)
        )
        logger.debug(f"Force at ({point[0]:.1f}, {point[1]:.1f}) pushed {affected} particle(s).")
        return affected

    # --- Read-only views ---

    def snapshot(self) -> tuple:
        """Position, radius and color of every particle, as immutable records."""
        return tuple(self.store.view(i) for i in range(len(self.store)))

    def debug_snapshot(self) -> tuple:
        """Full particle records, including id, velocity and mass."""
        return tuple(self.store.record(i) for i in range(len(self.store)))

    def get_total_kinetic_energy(self) -> float:
        """
        Calculates the total kinetic energy of the system.
        KE = sum(0.5 * m * v^2)
        """
        vel_sq = np.sum(self.store.velocities**2, axis=1)
        return float(np.sum(0.5 * self.store.masses * vel_sq))

    def get_total_momentum(self) -> tuple:
        """Total linear momentum sum(m * v) as an (x, y) tuple."""
        momentum = np.sum(self.store.masses[:, np.newaxis] * self.store.velocities, axis=0)
        return (float(momentum[0]), float(momentum[1]))
