# constants.py

"""
Application Constants

This module defines static configuration values for the application's framework
and the default tuning of the physics canvas. The defaults reproduce the feel of
the reference canvas and are overridden per run by the 'simulation' section of
config.json.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Name of the application's dedicated logger
LOGGER_NAME = "physics_canvas"

# Initial window dimensions (the window is resizable)
WIDTH = 1200  # Pixels
HEIGHT = 700  # Pixels

# Framerate
FPS = 60  # Frames (= simulation ticks) per second

# Window Title
TITLE = "Physics Canvas"

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
BACKGROUND_COLOR = (15, 23, 42)
HINT_COLOR = (148, 163, 184)

# Visual Effects
TRAIL_EFFECT_COLOR = (15, 23, 42, 13) # RGBA. Alpha controls trail length (lower = longer).
GLOW_ALPHA = 60 # Alpha of the soft halo drawn around each particle (0-255).
GLOW_RATIO = 1.4 # Halo radius as a multiple of the particle radius.

# Particle count controls used by the host (+/- keys)
MIN_PARTICLE_COUNT = 5
MAX_PARTICLE_COUNT = 100
PARTICLE_COUNT_STEP = 5

# Default simulation tuning
DEFAULT_SIMULATION_CONFIG = {
    "particle_count": 30,
    "radius_range": [10.0, 25.0],    # Pixels
    "color_palette": ["#38bdf8", "#22d3ee", "#34d399", "#a78bfa", "#f87171", "#fbbf24"],
    "drag_factor": 0.999,            # Velocity multiplier per tick
    "wall_damping_factor": 0.9,      # Speed kept after bouncing off a wall
    "mass_scale": 0.1,               # mass = radius * mass_scale
    "initial_speed": 1.0,            # Max |component| of seeded velocities, pixels/tick
    "force_influence_radius": 100.0, # Pixels
    "force_strength": 0.5,           # Velocity added at the pointer, pixels/tick
}
