import math


def body(x, y, vx=0.0, vy=0.0, radius=1.0, color='#ffffff'):
    """A particle description accepted by ParticleSystem.place()."""
    return {'position': (x, y), 'velocity': (vx, vy), 'radius': radius, 'color': color}


def distance(a, b):
    return math.hypot(b[0] - a[0], b[1] - a[1])
