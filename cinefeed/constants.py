"""Application constants - centralized configuration values."""

# =============================================================================
# Recommendations
# =============================================================================
RECOMMENDATION_CACHE_TTL = 300  # 5 minutes
CATEGORY_SIZE = 20
MIN_PREFERENCES_FOR_PERSONALIZATION = 3
GENRE_CATEGORY_COUNT = 2  # "Best {genre}" rows, taken from the first preferences

# For You scoring
GENRE_WEIGHT = 0.7
RATING_WEIGHT = 0.3

# =============================================================================
# Genre preferences
# =============================================================================
MAX_RECOMMENDED_PREFERENCES = 15
EXCELLENT_PREFERENCE_COUNT = 5
MATCH_COVERAGE_WEIGHT = 0.7  # share of preferences the item covers
MATCH_FOCUS_WEIGHT = 0.3  # share of item genres that are preferred
DEFAULT_MIN_MATCH_SCORE = 0.2  # cut-off for preference filtering

# =============================================================================
# Search
# =============================================================================
SEARCH_MIN_LENGTH = 3
SEARCH_CACHE_MAX_SIZE = 10
SEARCH_HISTORY_SIZE = 10
MAX_SEARCH_RESULTS = 20
SEARCH_POPULARITY_WEIGHT = 0.3
SEARCH_RATING_WEIGHT = 0.7

# =============================================================================
# API
# =============================================================================
HTTPX_TIMEOUT = 10.0
TMDB_RATE_LIMIT_SERVICE = "tmdb"
TMDB_REQUESTS_PER_SECOND = 4.0
TMDB_BURST_SIZE = 10  # one full population round is 4 requests
DEFAULT_REQUESTS_PER_SECOND = 2.0
DEFAULT_BURST_SIZE = 5

# =============================================================================
# Storage
# =============================================================================
PROFILE_KEY_PREFIX = "cinefeed:preferences"
DEFAULT_USER_ID = "local"

# =============================================================================
# Bundled TMDB genre list (used when the catalog is unreachable at load time)
# =============================================================================
FALLBACK_MOVIE_GENRES = [
    (28, "Action"), (12, "Adventure"), (16, "Animation"), (35, "Comedy"),
    (80, "Crime"), (99, "Documentary"), (18, "Drama"), (10751, "Family"),
    (14, "Fantasy"), (36, "History"), (27, "Horror"), (10402, "Music"),
    (9648, "Mystery"), (10749, "Romance"), (878, "Science Fiction"),
    (10770, "TV Movie"), (53, "Thriller"), (10752, "War"), (37, "Western"),
]
FALLBACK_TV_GENRES = [
    (10759, "Action & Adventure"), (16, "Animation"), (35, "Comedy"),
    (80, "Crime"), (99, "Documentary"), (18, "Drama"), (10751, "Family"),
    (10762, "Kids"), (9648, "Mystery"), (10763, "News"), (10764, "Reality"),
    (10765, "Sci-Fi & Fantasy"), (10766, "Soap"), (10767, "Talk"),
    (10768, "War & Politics"), (37, "Western"),
]
