"""Helpers shared by the per-family material tables.

Each material module owns its own Taichi fields plus a 0-d counter field.
These functions cover the host-side checks that every table repeats.
"""


def check_albedo(albedo) -> tuple[float, float, float]:
    """Return ``albedo`` as floats, rejecting channels outside [0, 1].

    A channel above 1 would make a bounce add energy.
    """
    channels = tuple(float(c) for c in albedo)
    if len(channels) != 3:
        raise ValueError(f"Albedo needs 3 channels, got {len(channels)}")
    for i, value in enumerate(channels):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Albedo channel {i} is {value}, outside [0, 1]")
    return channels


def claim_slot(counter, capacity: int, family: str) -> int:
    """Reserve the next free row of a material table and bump its counter."""
    slot = int(counter[None])
    if slot >= capacity:
        raise RuntimeError(f"No room for another {family} material (limit {capacity})")
    counter[None] = slot + 1
    return slot
