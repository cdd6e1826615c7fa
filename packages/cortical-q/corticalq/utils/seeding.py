"""Seeding infrastructure for reproducible agent runs.

An agent draws every stochastic decision (stage initialisation, rehearsal
minibatch sampling, epsilon-greedy draws) from one ``numpy.random.Generator``.
This module creates those generators and keeps the global numpy/torch state
in step with them.

Usage:
    seed = ensure_seed(user_seed)
    set_global_seed(seed)
    rng = get_rng(seed)
"""

import secrets

import numpy as np
import torch

# 2^32, the range accepted by both numpy and torch
MAX_SEED = 2**32


def generate_seed() -> int:
    """Generate a cryptographically random seed in [0, 2^32)."""
    return secrets.randbelow(MAX_SEED)


def ensure_seed(seed: int | None = None) -> int:
    """Return ``seed`` unchanged, or a freshly generated one when it is None."""
    if seed is not None:
        return seed
    return generate_seed()


def set_global_seed(seed: int) -> None:
    """Seed the global numpy and torch generators.

    Args:
        seed: The seed to use for global RNG state
    """
    np.random.seed(seed)  # noqa: NPY002
    torch.manual_seed(seed)


def get_rng(seed: int | None = None) -> np.random.Generator:
    """Create a seeded numpy random number Generator.

    The returned generator is independent of the global numpy state, so one
    instance can be owned by one agent.

    Args:
        seed: Seed for the RNG, or None to use a random seed

    Returns
    -------
        A numpy Generator instance seeded with the given seed
    """
    return np.random.default_rng(ensure_seed(seed))


def derive_run_seed(base_seed: int, run_index: int) -> int:
    """Derive the seed of run ``run_index`` of a multi-run session."""
    return (base_seed + run_index) % MAX_SEED


def torch_generator_from(rng: np.random.Generator) -> torch.Generator:
    """Create a torch Generator seeded from the next draw of ``rng``.

    Used where torch needs its own random stream (weight initialisation) but
    the draw must stay reproducible from the agent's single generator.
    """
    generator = torch.Generator()
    generator.manual_seed(int(rng.integers(0, MAX_SEED)))
    return generator
