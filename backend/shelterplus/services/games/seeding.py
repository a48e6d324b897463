import hashlib
import json
import random
from datetime import timezone
from typing import Sequence, TypeVar

from .card_pool import CATEGORY_ORDER

T = TypeVar('T')

ENDING_SEED_SUFFIX = '::ending'


def normalize_enabled_categories(enabled=None) -> dict:
    """Map every category to a bool; missing categories are enabled."""
    enabled = enabled or {}
    return {category: bool(enabled.get(category, True)) for category in CATEGORY_ORDER}


def _epoch_ms(value) -> int:
    # Stored timestamps are naive UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def create_seed(lobby) -> str:
    """Derive the deterministic deal seed for a lobby snapshot.

    The same guild, lobby id, creation time, round count and enabled
    categories always produce the same seed, and so the same deal.
    """
    channels = lobby.channels_config or {}
    enabled = normalize_enabled_categories(lobby.enabled_categories)
    seed_string = '::'.join([
        str(channels.get('guildId') or 'web'),
        str(lobby.id),
        str(_epoch_ms(lobby.created_at)),
        str(lobby.rounds),
        json.dumps(enabled, separators=(',', ':')),
    ])
    return hashlib.sha256(seed_string.encode('utf-8')).hexdigest()


def make_rng(seed: str) -> random.Random:
    return random.Random(seed)


def pick_index(size: int, rng: random.Random) -> int:
    return int(rng.random() * size) % size


def pick_item(pool: Sequence[T], rng: random.Random) -> T:
    if not pool:
        raise ValueError('Cannot pick from an empty pool')
    return pool[pick_index(len(pool), rng)]
