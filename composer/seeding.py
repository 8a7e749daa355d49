"""Deterministic per-node seed derivation.

Each node's seed is derived from its parent's seed and its structural
position (sibling index), or its name for named segments, so a node's seed
is a pure function of the global seed and its path from the root.
"""

import hashlib
import numbers
import secrets
from typing import Optional, Sequence, Union

import numpy as np

SEED_BITS = 64
_SEED_MASK = (1 << SEED_BITS) - 1


def _hash64(text: str) -> int:
    digest = hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(digest, "little")


def derive_seed(parent_seed: int, key: Union[int, str]) -> int:
    """Combine a parent seed with a child key into a 64-bit seed.

    Integer keys (sibling positions) and string keys (names, user keys) are
    tagged separately so ``0`` and ``"0"`` never collide.

    Args:
        parent_seed: Seed of the enclosing node
        key: Sibling index or name

    Returns:
        Unsigned 64-bit seed
    """
    if isinstance(key, numbers.Integral):
        key = int(key)
    tag = "i" if isinstance(key, int) else "s"
    return _hash64(f"{int(parent_seed) & _SEED_MASK}/{tag}:{key}")


def child_seed(parent_seed: int, index: int, name: Optional[str] = None) -> int:
    """Seed for the ``index``-th child; named children are seeded by name."""
    if name is not None:
        return derive_seed(parent_seed, f"name:{name}")
    return derive_seed(parent_seed, index)


def seed_for_path(
    root_seed: int, path: Sequence[int], names: Optional[Sequence[Optional[str]]] = None
) -> int:
    """Recompute a node's seed from the global seed and its tree path.

    Args:
        root_seed: Global composition seed
        path: Sibling indices from the root down to the node
        names: Segment names along the same path (``None`` entries for
            unnamed segments)

    Returns:
        The seed the Composer assigned to that node
    """
    seed = root_seed
    for depth, index in enumerate(path):
        name = names[depth] if names is not None else None
        seed = child_seed(seed, index, name)
    return seed


def random_seed() -> int:
    """Draw a fresh global seed for non-reproducible compositions."""
    return secrets.randbits(SEED_BITS)


def make_rng(seed: int) -> np.random.Generator:
    """Create the random source for a seed."""
    return np.random.default_rng(int(seed) & _SEED_MASK)
