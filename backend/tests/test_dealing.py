from datetime import datetime
from types import SimpleNamespace

from shelterplus.services.games.card_pool import CATEGORY_ORDER, CATEGORY_POOLS, ENDING_POOL
from shelterplus.services.games.dealer import CardDealer, deal_cards
from shelterplus.services.games.seeding import (
    create_seed, make_rng, pick_item, normalize_enabled_categories, ENDING_SEED_SUFFIX,
)


def _lobby(**overrides):
    fields = dict(
        id=7,
        created_at=datetime(2025, 3, 1, 12, 30, 15, 123000),
        rounds=5,
        enabled_categories=normalize_enabled_categories({}),
        channels_config={'guildId': 'guild-42'},
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _roster(count):
    return [SimpleNamespace(number=n, nickname=f'P{n}', discord_id=None) for n in range(1, count + 1)]


def test_seed_is_stable_for_same_snapshot():
    assert create_seed(_lobby()) == create_seed(_lobby())
    assert len(create_seed(_lobby())) == 64


def test_seed_changes_with_each_input():
    base = create_seed(_lobby())
    assert create_seed(_lobby(id=8)) != base
    assert create_seed(_lobby(rounds=6)) != base
    assert create_seed(_lobby(channels_config={})) != base
    assert create_seed(_lobby(created_at=datetime(2025, 3, 1, 12, 30, 16))) != base
    assert create_seed(_lobby(enabled_categories=normalize_enabled_categories({'Hobby': False}))) != base


def test_missing_guild_uses_web_placeholder():
    assert create_seed(_lobby(channels_config=None)) == create_seed(_lobby(channels_config={'voiceChannelId': '1'}))


def test_normalize_defaults_missing_categories_to_enabled():
    enabled = normalize_enabled_categories({'Phobia': False})
    assert list(enabled) == CATEGORY_ORDER
    assert enabled['Phobia'] is False
    assert all(v for k, v in enabled.items() if k != 'Phobia')


def test_same_seed_deals_identical_cards():
    enabled = normalize_enabled_categories({})
    seed = create_seed(_lobby())
    first = deal_cards(_roster(6), enabled, make_rng(seed))
    second = deal_cards(_roster(6), enabled, make_rng(seed))
    assert [p.cards for p in first] == [p.cards for p in second]


def test_deal_ignores_roster_order():
    enabled = normalize_enabled_categories({})
    seed = create_seed(_lobby())
    forward = deal_cards(_roster(5), enabled, make_rng(seed))
    backward = deal_cards(list(reversed(_roster(5))), enabled, make_rng(seed))
    assert [p.number for p in backward] == [1, 2, 3, 4, 5]
    assert [p.cards for p in forward] == [p.cards for p in backward]


def test_one_card_per_enabled_category_in_canonical_order():
    enabled = normalize_enabled_categories({'Bio': False, 'Luggage': False})
    dealt = deal_cards(_roster(3), enabled, make_rng('seed'))
    expected = [c for c in CATEGORY_ORDER if c not in ('Bio', 'Luggage')]
    for player in dealt:
        assert [category for category, _ in player.cards] == expected


def test_unique_categories_are_distinct_when_pool_suffices():
    enabled = normalize_enabled_categories({})
    players = len(CATEGORY_POOLS['Profession'])
    dealt = deal_cards(_roster(players), enabled, make_rng('distinct'))
    professions = [dict(p.cards)['Profession'] for p in dealt]
    assert len(set(professions)) == players
    assert set(professions) == set(CATEGORY_POOLS['Profession'])


def test_exhausted_pool_falls_back_to_generated_values():
    enabled = {c: c == 'Profession' for c in CATEGORY_ORDER}
    pools = {'Profession': ['Biologist', 'Engineer', 'Artist']}
    dealer = CardDealer(enabled, make_rng('small-pool'), pools=pools)
    dealt = dealer.deal(_roster(6))
    values = [p.cards[0][1] for p in dealt]
    assert sorted(values[:3]) == ['Artist', 'Biologist', 'Engineer']
    assert values[3:] == ['Profession - Generated 1', 'Profession - Generated 2', 'Profession - Generated 3']


def test_empty_pool_generates_from_first_player():
    enabled = {c: c == 'Hobby' for c in CATEGORY_ORDER}
    dealer = CardDealer(enabled, make_rng('empty'), pools={'Hobby': []})
    values = [p.cards[0][1] for p in dealer.deal(_roster(2))]
    assert values == ['Hobby - Generated 1', 'Hobby - Generated 2']


def test_repeatable_categories_draw_with_replacement():
    enabled = {c: c == 'ActionCard' for c in CATEGORY_ORDER}
    dealt = deal_cards(_roster(20), enabled, make_rng('repeat'))
    values = [p.cards[0][1] for p in dealt]
    assert set(values) <= set(CATEGORY_POOLS['ActionCard'])
    assert not any('Generated' in v for v in values)


def test_pick_item_index_is_floor_of_scaled_draw():
    class FixedRng:
        def __init__(self, value):
            self.value = value

        def random(self):
            return self.value

    assert pick_item(['a', 'b', 'c'], FixedRng(0.0)) == 'a'
    assert pick_item(['a', 'b', 'c'], FixedRng(0.5)) == 'b'
    assert pick_item(['a', 'b', 'c'], FixedRng(0.9999)) == 'c'


def test_ending_draw_is_deterministic_and_independent_of_dealing():
    seed = create_seed(_lobby())
    first = pick_item(ENDING_POOL, make_rng(seed + ENDING_SEED_SUFFIX))
    second = pick_item(ENDING_POOL, make_rng(seed + ENDING_SEED_SUFFIX))
    assert first == second
