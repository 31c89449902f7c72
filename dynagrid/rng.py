"""Shared random number generator for calls made without an explicit rng."""

import random
from typing import Optional


# Used by every function whose rng argument is left as None
default_rng = random.Random()


def set_global_seed(seed: Optional[int]) -> None:
    """Reseed the shared generator for reproducible runs."""
    default_rng.seed(seed)


def resolve(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else default_rng
