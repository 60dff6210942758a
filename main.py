# main.py

import os
import sys
import logging

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame
import numpy as np

import constants
import logger_setup
from particle_system import ParticleSystem
from settings import load_config

# Get the application's dedicated logger
logger = logging.getLogger(constants.LOGGER_NAME)

import cProfile, pstats


def hex_to_rgb(color: str) -> tuple:
    """Converts '#rrggbb' (or 'rrggbb') to an (R, G, B) tuple. Unknown formats render white."""
    value = color.lstrip('#')
    if len(value) != 6:
        return constants.WHITE
    try:
        return tuple(int(value[k:k + 2], 16) for k in (0, 2, 4))
    except ValueError:
        return constants.WHITE


def next_particle_count(current: int, delta: int) -> int:
    """Steps the particle count by delta, keeping it within the host's allowed range."""
    return max(constants.MIN_PARTICLE_COUNT, min(constants.MAX_PARTICLE_COUNT, current + delta))


def log_interval(run_control: dict) -> int:
    """Ticks between throttled log lines; never below 1."""
    try:
        return max(1, int(run_control.get('log_throttle_ticks', 100)))
    except (TypeError, ValueError, OverflowError):
        return 100


def draw_particles(screen: pygame.Surface, glow_surface: pygame.Surface, snapshot):
    """
    Draws every particle from a snapshot: a translucent halo on the glow
    surface, then the solid disc on the screen.
    """
    glow_surface.fill((0, 0, 0, 0))
    for view in snapshot:
        rgb = hex_to_rgb(view.color)
        center = (int(view.position[0]), int(view.position[1]))
        pygame.draw.circle(glow_surface, (*rgb, constants.GLOW_ALPHA), center,
                           int(view.radius * constants.GLOW_RATIO))
    screen.blit(glow_surface, (0, 0))
    for view in snapshot:
        center = (int(view.position[0]), int(view.position[1]))
        pygame.draw.circle(screen, hex_to_rgb(view.color), center, int(view.radius))


def handle_event(event, particle_system: ParticleSystem) -> bool:
    """
    Forwards one pygame event to the simulation. Returns False when the user
    asked to quit.
    """
    if event.type == pygame.QUIT:
        return False
    if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
        return False
    if event.type == pygame.MOUSEMOTION:
        particle_system.apply_force_at(event.pos)
    elif event.type == pygame.VIDEORESIZE:
        particle_system.resize((event.w, event.h))
    elif event.type == pygame.KEYDOWN and event.key in (pygame.K_PLUS, pygame.K_EQUALS, pygame.K_KP_PLUS):
        count = next_particle_count(particle_system.particle_count, constants.PARTICLE_COUNT_STEP)
        particle_system.init(count)
    elif event.type == pygame.KEYDOWN and event.key in (pygame.K_MINUS, pygame.K_KP_MINUS):
        count = next_particle_count(particle_system.particle_count, -constants.PARTICLE_COUNT_STEP)
        particle_system.init(count)
    return True


def run_simulation_loop(particle_system: ParticleSystem, screen, clock, run_control: dict):
    """
    The main loop: one simulation tick and one frame per iteration.
    A max_ticks of 0 runs until the window is closed.
    """
    # --- Loop Setup ---
    running = True
    frame = 0
    log_throttle = log_interval(run_control)
    max_ticks = run_control.get('max_ticks', 0)
    font = pygame.font.SysFont(None, 20)
    hint = font.render("Move the mouse to push particles  |  +/- change count", True, constants.HINT_COLOR)

    trail_surface = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
    glow_surface = pygame.Surface(screen.get_size(), pygame.SRCALPHA)

    while running:
        # Event handling
        for event in pygame.event.get():
            if not handle_event(event, particle_system):
                running = False
            elif event.type == pygame.VIDEORESIZE:
                trail_surface = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
                glow_surface = pygame.Surface(screen.get_size(), pygame.SRCALPHA)

        # --- Physics Update ---
        particle_system.step()

        # --- Logging (throttled) ---
        if frame % log_throttle == 0:
            px, py = particle_system.get_total_momentum()
            logger.debug(
                f"Frame={frame}, "
                f"Tick={particle_system.tick}, "
                f"Particles={len(particle_system)}, "
                f"Kinetic={particle_system.get_total_kinetic_energy():.3f}, "
                f"Momentum=({px:+.3f}, {py:+.3f}), "
                f"Collisions={particle_system.last_collision_count}, "
                f"WallContacts={particle_system.last_wall_contacts}"
            )

        # --- Drawing ---
        trail_surface.fill(constants.TRAIL_EFFECT_COLOR)
        screen.blit(trail_surface, (0, 0))
        draw_particles(screen, glow_surface, particle_system.snapshot())
        screen.blit(hint, (12, screen.get_height() - hint.get_height() - 12))
        pygame.display.flip()
        clock.tick(constants.FPS)
        frame += 1

        if max_ticks and frame >= max_ticks:
            logger.info(f"Reached max_ticks ({max_ticks}). Stopping simulation.")
            running = False


def main(config_path: str = 'config.json'):
    """
    Main function to initialize and run the physics canvas.
    """
    # --- Setup ---
    # Logging is not set up yet, so a failed load is reported with print.
    try:
        config = load_config(config_path)
    except (OSError, ValueError) as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return 1

    logger_setup.setup_logging(config)
    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config.get('master_seed'))
    logger.info(f"Master RNG initialized with seed: {config.get('master_seed')}")
    run_control = config.get('run_control', {})

    # --- Initialization ---
    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption(constants.TITLE)
    screen.fill(constants.BACKGROUND_COLOR)
    clock = pygame.time.Clock()

    particle_system = ParticleSystem(
        config=config.get('simulation', {}),
        rng=rng,
        bounds=screen.get_size()
    )

    if run_control.get('profile', False):
        profiler = cProfile.Profile()
        profiler.enable()
        run_simulation_loop(particle_system, screen, clock, run_control)
        profiler.disable()
        logger.info("Profiling complete. Printing stats...")
        stats = pstats.Stats(profiler).sort_stats('cumtime')
        stats.print_stats(20) # Print the top 20 time-consuming functions
    else:
        run_simulation_loop(particle_system, screen, clock, run_control)

    logger.info("Application shutting down.")
    pygame.quit()
    return 0


if __name__ == "__main__":
    sys.exit(main())
