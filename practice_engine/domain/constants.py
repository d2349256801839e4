"""Named constants for the practice session engine."""

# Clock
SECONDS_PER_MINUTE = 60
TICK_SECONDS = 1

# Media
MEDIA_SETTLE_DELAY_SECONDS = 0.1

# Content selection
SELECTION_DEBOUNCE_SECONDS = 0.3

# Fallback reward policy (used when no catalog configuration matched)
FALLBACK_MIN_MINUTES = 1
FALLBACK_MAX_MINUTES = 10
FALLBACK_MIN_DURATION_REWARD = 3
FALLBACK_MAX_DURATION_REWARD = 15
FALLBACK_COUNT_DIVISOR = 10
FALLBACK_MAX_COUNT_REWARD = 60

# Default vocabulary; deployments override it through settings
DEFAULT_EMOTION_TAGS = (
    "sad",
    "angry",
    "afraid",
    "loved",
    "happy",
    "surprised",
    "calm",
    "disgusted",
    "neutral",
    "stressed",
)
DEFAULT_ALLOWED_COUNTS = (27, 54, 108, 216, 324, 432, 540, 600)
DEFAULT_MIN_DURATION_MINUTES = 1
DEFAULT_MAX_DURATION_MINUTES = 10

DEFAULT_ACTIVITY_TYPE = "meditation"
