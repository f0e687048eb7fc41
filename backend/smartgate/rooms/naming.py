"""Human-friendly room identifiers such as ``leslie-214``."""
import random
import re
import secrets
from typing import Callable, Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

DEFAULT_BASE = "anon"


def slugify_name(name: Optional[str]) -> str:
    """Lowercase *name* and collapse everything but ``[a-z0-9]`` into dashes.

    Leading and trailing dashes are stripped; an empty result (or a missing
    name) falls back to ``"anon"``.
    """
    text = str(name or DEFAULT_BASE).lower().strip()
    slug = _NON_ALNUM.sub("-", text).strip("-")
    return slug or DEFAULT_BASE


def make_room_id(
    base: str,
    exists: Callable[[str], bool],
    attempts: int = 5,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick ``<base>-<100..999>`` not already taken.

    After *attempts* collisions a four hex character suffix is used instead,
    without a further uniqueness check.
    """
    rng = rng or random
    for _ in range(attempts):
        candidate = f"{base}-{rng.randint(100, 999)}"
        if not exists(candidate):
            return candidate
    return f"{base}-{secrets.token_hex(2)}"
