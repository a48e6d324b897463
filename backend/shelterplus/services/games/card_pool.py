"""Static card, scenario and ending pools."""

CATEGORY_ORDER = [
    'Profession',
    'Bio',
    'Health',
    'Hobby',
    'Phobia',
    'Personality',
    'ExtraInfo',
    'Knowledge',
    'Luggage',
    'ActionCard',
    'ConditionCard',
]

# Categories drawn with replacement; every other category is unique per game
REPEATABLE_CATEGORIES = frozenset({'ActionCard', 'ConditionCard'})


CATEGORY_POOLS = {
    'Profession': [
        'Biologist', 'Engineer', 'Artist', 'Surgeon', 'Farmer', 'Electrician',
        'Teacher', 'Chef', 'Soldier', 'Pilot', 'Psychologist', 'Plumber',
    ],
    'Bio': [
        'Age 25', 'Age 35', 'Age 42', 'Age 19', 'Age 58', 'Age 67',
        'Age 30, infertile', 'Age 28, pregnant', 'Age 47', 'Age 22',
    ],
    'Health': [
        'Perfect health', 'Asthma', 'Diabetic', 'Nearsighted', 'Chronic insomnia',
        'Allergic to nuts', 'Bad back', 'Hearing loss', 'Recovering from flu',
    ],
    'Hobby': [
        'Gardening', 'Chess', 'Rock climbing', 'Fishing', 'Knitting', 'Carpentry',
        'Amateur radio', 'Cooking', 'Juggling', 'Astronomy',
    ],
    'Phobia': [
        'Fear of heights', 'Claustrophobic', 'Fear of spiders', 'Fear of the dark',
        'Fear of crowds', 'Fear of water', 'Fear of blood', 'Fear of silence',
    ],
    'Personality': [
        'Optimistic', 'Pessimistic', 'Leader', 'Paranoid', 'Generous', 'Hot-tempered',
        'Calm under pressure', 'Compulsive liar', 'Peacemaker',
    ],
    'ExtraInfo': [
        'Knows first aid', 'Won a lottery', 'Is a twin', 'Served time in prison',
        'Speaks five languages', 'Former cult member', 'Has a pilot licence',
    ],
    'Knowledge': [
        'Survival skills', 'Medical training', 'Mechanical skills', 'Hydroponics',
        'Radio engineering', 'Water purification', 'Self-defence',
    ],
    'Luggage': [
        'Backpack of tools', 'Suitcase of clothes', 'Box of canned food',
        'First aid kit', 'Seed vault sampler', 'Hunting rifle', 'Solar charger',
    ],
    'ActionCard': ['Swap a card', 'Peek at a card', 'Trade information'],
    'ConditionCard': ['Lose a turn', 'Share a secret', 'Reveal a card'],
}

APOCALYPSE_BUNKER_POOL = [
    {'apocalypse': 'Asteroid Impact', 'bunker': 'Mountain Shelter'},
    {'apocalypse': 'Global Pandemic', 'bunker': 'Underground Labs'},
    {'apocalypse': 'Solar Flare Catastrophe', 'bunker': 'Polar Research Vault'},
    {'apocalypse': 'Alien Invasion', 'bunker': 'Desert Command Center'},
    {'apocalypse': 'Global Flood', 'bunker': 'Floating Ark'},
    {'apocalypse': 'Nuclear Winter', 'bunker': 'Subterranean Metro Complex'},
    {'apocalypse': 'Supervolcano Eruption', 'bunker': 'Abandoned Missile Silo'},
    {'apocalypse': 'Rogue AI Uprising', 'bunker': 'Faraday-Shielded Cellar'},
]

APOCALYPSE_POOL = [entry['apocalypse'] for entry in APOCALYPSE_BUNKER_POOL]

BUNKER_POOL = [entry['bunker'] for entry in APOCALYPSE_BUNKER_POOL]

ENDING_POOL = [
    {
        'title': 'A New Dawn',
        'description': 'The survivors emerge to clean air and rebuild a small, stubborn settlement.',
    },
    {
        'title': 'Quiet Extinction',
        'description': 'Supplies run out before the surface recovers. The bunker falls silent.',
    },
    {
        'title': 'Contact',
        'description': 'A radio signal leads the group to another shelter and a fragile alliance.',
    },
    {
        'title': 'Mutiny',
        'description': 'Old grudges split the group; only half of them leave the bunker alive.',
    },
    {
        'title': 'Second Chance',
        'description': 'The seed stock sprouts. Within a decade the valley is green again.',
    },
]
