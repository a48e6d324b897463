import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .card_pool import CATEGORY_ORDER, CATEGORY_POOLS, REPEATABLE_CATEGORIES
from .seeding import pick_index


@dataclass
class DealtPlayer:
    number: int
    nickname: str
    discord_id: Optional[str]
    cards: List[Tuple[str, str]] = field(default_factory=list)  # (category, title)


class CardDealer:
    """Deals one card per enabled category to every player.

    Unique categories draw without replacement across the whole game and fall
    back to generated titles once exhausted; repeatable categories draw from
    the full pool every time.
    """

    def __init__(self, enabled: Dict[str, bool], rng: random.Random, pools: Optional[Dict[str, List[str]]] = None):
        pools = CATEGORY_POOLS if pools is None else pools
        self.rng = rng
        self.categories = [c for c in CATEGORY_ORDER if enabled.get(c)]
        self.pools = {c: list(pools.get(c, [])) for c in self.categories}
        self.used = {c: set() for c in self.categories}
        self.fallback_counters = {c: 0 for c in self.categories}

    def draw(self, category: str) -> str:
        pool = self.pools[category]
        value = None
        if category in REPEATABLE_CATEGORIES:
            if pool:
                value = pool[pick_index(len(pool), self.rng)]
        else:
            available = [item for item in pool if item not in self.used[category]]
            if available:
                value = available[pick_index(len(available), self.rng)]

        if not value:
            self.fallback_counters[category] += 1
            value = f"{category} - Generated {self.fallback_counters[category]}"

        if category not in REPEATABLE_CATEGORIES:
            self.used[category].add(value)
        return value

    def deal(self, roster: Iterable) -> List[DealtPlayer]:
        dealt = []
        for entry in sorted(roster, key=lambda p: p.number):
            player = DealtPlayer(number=entry.number, nickname=entry.nickname, discord_id=entry.discord_id)
            player.cards = [(category, self.draw(category)) for category in self.categories]
            dealt.append(player)
        return dealt


def deal_cards(roster: Iterable, enabled: Dict[str, bool], rng: random.Random) -> List[DealtPlayer]:
    return CardDealer(enabled, rng).deal(roster)
