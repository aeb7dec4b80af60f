"""Seeded, layered 2-D Perlin noise for height fields.

Everything here is a pure function of its arguments: the permutation
table and lattice offset come from ``numpy.random.default_rng(seed)``,
so the same seed and options always produce a bit-identical array.
"""

import logging

import numpy as np
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Gradient directions for the 16 hash values of classic Perlin noise,
# evaluated on the z = 0 plane.
_GRADIENTS = np.array(
    [
        [1, 1], [-1, 1], [1, -1], [-1, -1],
        [1, 0], [-1, 0], [1, 0], [-1, 0],
        [0, 1], [0, -1], [0, 1], [0, -1],
        [1, 1], [1, -1], [-1, 1], [-1, -1],
    ],
    dtype=np.float64,
)


class NoiseOptions(BaseModel):
    """Octave parameters for one height field."""
    octaves: int = Field(default=4, ge=1)
    persistence: float = Field(default=0.5, gt=0.0)
    scale: float = Field(default=0.05, gt=0.0)   # Base frequency, cycles per tile
    lacunarity: float = Field(default=2.0, gt=0.0)


def permutation_table(seed: int) -> np.ndarray:
    """Build the doubled 512-entry permutation table for a seed."""
    p = np.arange(256, dtype=np.int64)
    rng = np.random.default_rng(seed)
    rng.shuffle(p)
    return np.stack([p, p]).flatten()


def _fade(t: np.ndarray) -> np.ndarray:
    return t * t * t * (t * (t * 6 - 15) + 10)


def _lerp(a: np.ndarray, b: np.ndarray, t: np.ndarray) -> np.ndarray:
    return a + t * (b - a)


def _gradient_dot(hashes: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    g = _GRADIENTS[hashes & 15]
    return g[..., 0] * x + g[..., 1] * y


def perlin(p: np.ndarray, x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Sample single-octave Perlin noise at the given coordinates."""
    x0 = np.floor(x)
    y0 = np.floor(y)
    xi = x0.astype(np.int64) & 255
    yi = y0.astype(np.int64) & 255
    xf = x - x0
    yf = y - y0
    u = _fade(xf)
    v = _fade(yf)

    n00 = _gradient_dot(p[p[xi] + yi], xf, yf)
    n01 = _gradient_dot(p[p[xi] + yi + 1], xf, yf - 1)
    n10 = _gradient_dot(p[p[xi + 1] + yi], xf - 1, yf)
    n11 = _gradient_dot(p[p[xi + 1] + yi + 1], xf - 1, yf - 1)

    return _lerp(_lerp(n00, n10, u), _lerp(n01, n11, u), v)


def generate_height_field(
    width: int,
    height: int,
    seed: int,
    options: NoiseOptions | None = None,
) -> np.ndarray:
    """Generate a normalized multi-octave height field.

    Octave ``k`` contributes amplitude ``persistence**k`` at frequency
    ``scale * lacunarity**k``; the result is divided by the total
    amplitude so values stay roughly within [-1, 1].

    Args:
        width: Number of columns, must be positive.
        height: Number of rows, must be positive.
        seed: Seed for the permutation table and lattice offset.
        options: Octave parameters. Defaults to NoiseOptions().

    Returns:
        A float64 array of shape (height, width), indexed [y, x].

    Raises:
        ValueError: If a dimension is not positive, or the field
            contains non-finite values.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Height field dimensions must be positive, got {width}x{height}")
    options = options or NoiseOptions()

    p = permutation_table(seed)
    # Shift off the integer lattice, where Perlin noise is always zero.
    offset_x, offset_y = np.random.default_rng(seed).uniform(0.0, 256.0, size=2)

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float64)
    field = np.zeros((height, width), dtype=np.float64)
    amplitude = 1.0
    frequency = options.scale
    total_amplitude = 0.0

    for _ in range(options.octaves):
        field += amplitude * perlin(
            p,
            xs * frequency + offset_x,
            ys * frequency + offset_y,
        )
        total_amplitude += amplitude
        amplitude *= options.persistence
        frequency *= options.lacunarity

    field /= total_amplitude

    if not np.all(np.isfinite(field)):
        raise ValueError(f"Height field for seed {seed} contains non-finite values")

    logger.debug(
        "Generated %dx%d height field (seed=%d, octaves=%d, scale=%s)",
        width, height, seed, options.octaves, options.scale,
    )
    return field
