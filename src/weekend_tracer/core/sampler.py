"""Explicit, seedable random streams for Monte Carlo sampling.

Taichi's built-in ``ti.random()`` draws from per-thread generators whose
assignment to pixels depends on scheduling, so renders made with it cannot be
reproduced. Instead, every sample owns a small integer state that is threaded
through each sampling call and handed back advanced:

    value, state = random_real(state)

The state is a non-negative 31-bit integer held in an ``i32``. It advances
with a linear congruential step modulo 2^31; each emitted value is an integer
hash of the new state, so nearby seeds do not produce correlated sequences.
``init_sample_state`` derives the starting state of one sample from the render
seed, the pixel index and the sample index, which makes every sample a pure
function of those three integers.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from weekend_tracer.core.sampler import init_sample_state, random_real
    >>> # Inside a Taichi kernel:
    >>> # state = init_sample_state(seed, pixel_index, sample_index)
    >>> # u, state = random_real(state)
"""

import taichi as ti

# All states and hashes are kept in [0, 2^31)
STATE_MASK = 0x7FFFFFFF

# Linear congruential step (modulus 2^31)
LCG_MULTIPLIER = 1103515245
LCG_INCREMENT = 12345

# Number of hash bits turned into a real and the matching scale
RANDOM_BITS = 24
RANDOM_SCALE = 1.0 / (1 << RANDOM_BITS)


def normalize_seed(seed: int) -> int:
    """Fold an arbitrary Python integer into the non-negative state range."""
    return int(seed) & STATE_MASK


@ti.func
def hash_state(x: ti.i32) -> ti.i32:
    """Mix the bits of a 31-bit integer (Wang integer hash).

    Multiplications wrap and are masked straight back into 31 bits, so every
    intermediate value stays non-negative and right shifts never sign-extend.

    Args:
        x: Any 32-bit integer.

    Returns:
        A hashed value in [0, 2^31).
    """
    h = x & STATE_MASK
    h = (h ^ 61) ^ (h >> 16)
    h = (h * 9) & STATE_MASK
    h = h ^ (h >> 4)
    h = (h * 0x27D4EB2D) & STATE_MASK
    h = h ^ (h >> 15)
    return h


@ti.func
def init_sample_state(seed: ti.i32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.i32:
    """Derive the starting random state for one sample.

    Args:
        seed: The render seed.
        pixel_index: Linear pixel index (row * width + column).
        sample_index: Index of the sample within the pixel.

    Returns:
        A state in [0, 2^31) unique to (seed, pixel, sample) up to hash
        collisions.
    """
    state = hash_state(seed)
    state = hash_state(state ^ pixel_index)
    state = hash_state(state ^ sample_index)
    return state


@ti.func
def next_state(state: ti.i32) -> ti.i32:
    """Advance a random state by one linear congruential step."""
    return (state * LCG_MULTIPLIER + LCG_INCREMENT) & STATE_MASK


@ti.func
def random_real(state: ti.i32):
    """Draw a uniform real in [0, 1).

    Args:
        state: The current random state.

    Returns:
        A tuple (value, new_state).
    """
    new_state = next_state(state)
    bits = hash_state(new_state) >> (31 - RANDOM_BITS)
    return ti.cast(bits, ti.f64) * RANDOM_SCALE, new_state


@ti.func
def random_range(state: ti.i32, lo: ti.f64, hi: ti.f64):
    """Draw a uniform real in [lo, hi).

    Returns:
        A tuple (value, new_state).
    """
    u, new_state = random_real(state)
    return lo + (hi - lo) * u, new_state
