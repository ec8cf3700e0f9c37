"""Core constants: collection names and shared literal values.

Firestore has no DDL or migrations; collections are created when the first
document is written. These names are the single source of truth for the
layout used by both store backends:

    restaurants/{restaurantId}
    restaurants/{restaurantId}/ratings/{ratingId}
"""

COLLECTION_RESTAURANTS = "restaurants"
SUBCOLLECTION_RATINGS = "ratings"

# Display name used when the identity provider supplies none.
DEFAULT_USERNAME = "Anonymous"

# Number of restaurants the populate action writes.
DEFAULT_SEED_COUNT = 20
