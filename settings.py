# settings.py

"""
Configuration loading and sanitising.

The physics canvas must stay in a valid, steppable state no matter what the
configuration says, so out-of-range simulation options are clamped to usable
values with a warning instead of raising. Only a missing or malformed config
file is treated as fatal, and that decision belongs to the host.
"""

import json
import math
import logging
from typing import Any, Dict

from constants import DEFAULT_SIMULATION_CONFIG, LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

# --- Data Contracts ---
#
# load_config(path: str) -> Dict[str, Any]:
#   - Inputs: path to a JSON file.
#   - Outputs: the parsed configuration dictionary.
#   - Side Effects: logs progress; re-raises FileNotFoundError and
#     json.JSONDecodeError after logging them.
#
# build_simulation_config(section: Dict[str, Any] | None) -> Dict[str, Any]:
#   - Inputs: the 'simulation' section of the configuration (may be partial).
#   - Outputs: a complete, sanitised copy merged over DEFAULT_SIMULATION_CONFIG.
#   - Invariants: particle_count >= 0; 0 < radius_range[0] <= radius_range[1];
#     0 < drag_factor <= 1; 0 <= wall_damping_factor <= 1; mass_scale > 0;
#     initial_speed >= 0; color_palette is a non-empty list.

_MIN_RADIUS = 1e-3


def load_config(path: str) -> Dict[str, Any]:
    """Loads a JSON configuration file."""
    logger.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
        logger.info("Configuration loaded successfully.")
        return config
    except FileNotFoundError:
        logger.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logger.error(f"Error decoding JSON from {path}.")
        raise


def _clamp(name, value, low, high):
    clamped = min(max(value, low), high)
    if clamped != value:
        logger.warning(f"Config '{name}'={value} is out of range [{low}, {high}]. Using {clamped}.")
    return clamped


def _number(name, value, default):
    """Coerces value to a finite float, falling back to default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Config '{name}'={value!r} is not a number. Using {default}.")
        return float(default)
    if not math.isfinite(number):
        logger.warning(f"Config '{name}'={value!r} is not finite. Using {default}.")
        return float(default)
    return number


def build_simulation_config(section: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Merges a (possibly partial) 'simulation' section over the defaults and
    clamps every option into its valid range. Values that cannot be read as
    finite numbers fall back to the defaults.
    """
    defaults = DEFAULT_SIMULATION_CONFIG
    config = dict(defaults)
    config.update(section or {})

    count = _number('particle_count', config['particle_count'], defaults['particle_count'])
    config['particle_count'] = int(_clamp('particle_count', int(count), 0, float('inf')))

    try:
        low, high = config['radius_range']
    except (TypeError, ValueError):
        logger.warning(f"Config 'radius_range'={config['radius_range']!r} is not a [min, max] pair. "
                       f"Using {defaults['radius_range']}.")
        low, high = defaults['radius_range']
    low = _number('radius_range[0]', low, defaults['radius_range'][0])
    high = _number('radius_range[1]', high, defaults['radius_range'][1])
    if low > high:
        logger.warning(f"Config 'radius_range'=[{low}, {high}] is inverted. Swapping bounds.")
        low, high = high, low
    low = _clamp('radius_range[0]', low, _MIN_RADIUS, float('inf'))
    high = max(high, low)
    config['radius_range'] = [low, high]

    palette = config['color_palette']
    if isinstance(palette, str):
        palette = [palette]
    try:
        palette = list(palette or [])
    except TypeError:
        palette = []
    if not palette:
        logger.warning("Config 'color_palette' is empty or invalid. Using the default palette.")
        palette = list(defaults['color_palette'])
    config['color_palette'] = palette

    drag = _number('drag_factor', config['drag_factor'], defaults['drag_factor'])
    if drag <= 0.0:
        logger.warning(f"Config 'drag_factor'={drag} must be positive. Using 1.0.")
        drag = 1.0
    config['drag_factor'] = _clamp('drag_factor', drag, 0.0, 1.0)

    damping = _number('wall_damping_factor', config['wall_damping_factor'], defaults['wall_damping_factor'])
    config['wall_damping_factor'] = _clamp('wall_damping_factor', damping, 0.0, 1.0)

    mass_scale = _number('mass_scale', config['mass_scale'], defaults['mass_scale'])
    if mass_scale <= 0.0:
        logger.warning(f"Config 'mass_scale'={mass_scale} must be positive. Using {defaults['mass_scale']}.")
        mass_scale = defaults['mass_scale']
    config['mass_scale'] = mass_scale

    speed = _number('initial_speed', config['initial_speed'], defaults['initial_speed'])
    config['initial_speed'] = _clamp('initial_speed', abs(speed), 0.0, float('inf'))
    config['force_influence_radius'] = _number('force_influence_radius', config['force_influence_radius'],
                                               defaults['force_influence_radius'])
    config['force_strength'] = _number('force_strength', config['force_strength'], defaults['force_strength'])

    logger.debug(f"Simulation config resolved: {config}")
    return config
