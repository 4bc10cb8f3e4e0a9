"""
Business constants for the Lava Show chat backend.

Ticket rates mirror the published prices in the knowledge document
(experiences.classic.pricing and experiences.premium.price).
"""

CURRENCY = "ISK"

# Per-person ticket rates by package. Premium has no child rate
# (Premium admission is 13+ only).
TICKET_RATES = {
    'classic': {
        'adults': 6590,
        'children': 3590,
        'students': 5590,
        'seniors': 5590,
    },
    'premium': {
        'adults': 9990,
        'students': 8990,
        'seniors': 8990,
    },
}

PACKAGE_NAMES = {
    'classic': 'Classic Experience',
    'premium': 'Premium Experience',
}

# Youngest age admitted as an adult (and the Premium minimum age)
ADULT_MIN_AGE = 13

# Flat-rate family bundle (Classic only)
FAMILY_PACKAGE_NAME = "Family Package"
FAMILY_PACKAGE_PRICE = 17990
FAMILY_PACKAGE_MAX_ADULTS = 2
FAMILY_PACKAGE_MAX_CHILDREN = 3

# Group discount
GROUP_DISCOUNT_THRESHOLD = 10
GROUP_DISCOUNT_PERCENTAGE = 10

# Conversation context bounds
MAX_CONTEXT_MESSAGES = 10
MAX_TOPIC_HISTORY = 5
MAX_PREVIOUS_QUERIES = 3

# Priorities for matches added from conversation context
LAST_QUERY_TYPE_BOOST = 2
BOOKING_CONTEXT_PRIORITY = 6
INTEREST_CONTEXT_PRIORITY = 5
FAQ_MATCH_PRIORITY = 8
