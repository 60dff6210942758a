import json
import math

import pytest

from constants import DEFAULT_SIMULATION_CONFIG
from particle_system import ParticleSystem
from settings import build_simulation_config, load_config


def test_load_config_reads_json(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps({'run_id': 'abc', 'simulation': {'particle_count': 7}}))

    config = load_config(str(path))

    assert config['run_id'] == 'abc'
    assert config['simulation']['particle_count'] == 7


def test_load_config_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / 'missing.json'))


def test_load_config_malformed_file_raises(tmp_path):
    path = tmp_path / 'config.json'
    path.write_text('{"run_id": ')
    with pytest.raises(json.JSONDecodeError):
        load_config(str(path))


def test_defaults_match_reference_tuning():
    config = build_simulation_config()
    assert config == DEFAULT_SIMULATION_CONFIG
    assert config['drag_factor'] == 0.999
    assert config['wall_damping_factor'] == 0.9
    assert config['mass_scale'] == 0.1


def test_partial_section_is_merged_over_defaults():
    config = build_simulation_config({'particle_count': 12, 'mass_scale': 2.0})
    assert config['particle_count'] == 12
    assert config['mass_scale'] == 2.0
    assert config['radius_range'] == DEFAULT_SIMULATION_CONFIG['radius_range']


def test_defaults_are_not_mutated():
    config = build_simulation_config({'color_palette': ['#000000']})
    config['radius_range'][0] = 99.0
    assert DEFAULT_SIMULATION_CONFIG['color_palette'] != ['#000000']
    assert DEFAULT_SIMULATION_CONFIG['radius_range'][0] == 10.0


@pytest.mark.parametrize('section, key, expected', [
    ({'particle_count': -4}, 'particle_count', 0),
    ({'radius_range': [8, 3]}, 'radius_range', [3.0, 8.0]),
    ({'radius_range': [-2, 5]}, 'radius_range', [1e-3, 5.0]),
    ({'radius_range': [-5, -2]}, 'radius_range', [1e-3, 1e-3]),
    ({'drag_factor': 1.5}, 'drag_factor', 1.0),
    ({'drag_factor': 0.0}, 'drag_factor', 1.0),
    ({'wall_damping_factor': -0.2}, 'wall_damping_factor', 0.0),
    ({'wall_damping_factor': 3.0}, 'wall_damping_factor', 1.0),
    ({'mass_scale': 0}, 'mass_scale', 0.1),
    ({'initial_speed': -2.0}, 'initial_speed', 2.0),
    ({'color_palette': []}, 'color_palette', DEFAULT_SIMULATION_CONFIG['color_palette']),
    ({'color_palette': 7}, 'color_palette', DEFAULT_SIMULATION_CONFIG['color_palette']),
    ({'particle_count': float('nan')}, 'particle_count', 30),
    ({'particle_count': 'many'}, 'particle_count', 30),
    ({'radius_range': [5]}, 'radius_range', [10.0, 25.0]),
    ({'radius_range': None}, 'radius_range', [10.0, 25.0]),
    ({'radius_range': [float('nan'), 12]}, 'radius_range', [10.0, 12.0]),
    ({'drag_factor': None}, 'drag_factor', 0.999),
    ({'drag_factor': float('nan')}, 'drag_factor', 0.999),
    ({'wall_damping_factor': float('inf')}, 'wall_damping_factor', 0.9),
    ({'mass_scale': 'heavy'}, 'mass_scale', 0.1),
    ({'initial_speed': float('-inf')}, 'initial_speed', 1.0),
    ({'force_strength': None}, 'force_strength', 0.5),
    ({'force_influence_radius': float('nan')}, 'force_influence_radius', 100.0),
])
def test_out_of_range_values_are_clamped(section, key, expected):
    assert build_simulation_config(section)[key] == expected


def test_invalid_config_still_yields_a_valid_simulation():
    system = ParticleSystem(
        config={'particle_count': -3, 'radius_range': [0, -1], 'drag_factor': -1, 'mass_scale': -5},
        seed=0,
        bounds=(100, 100),
    )
    assert len(system) == 0

    system.init(10)
    for p in system.debug_snapshot():
        assert p.radius > 0
        assert p.mass > 0
    system.step()


@pytest.mark.parametrize('section', [
    {'radius_range': [5]},
    {'drag_factor': None},
    {'particle_count': float('nan')},
    {'drag_factor': float('nan'), 'particle_count': 5},
])
def test_malformed_config_builds_a_finite_simulation(section):
    system = ParticleSystem(config=section, seed=0, bounds=(100, 100))
    system.step()
    for p in system.debug_snapshot():
        assert all(math.isfinite(v) for v in p.position + p.velocity)
