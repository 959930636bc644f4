"""
Attune Configuration

Copy this file to config.py and fill in your values.
config.py is gitignored to keep secrets safe.
"""

# =============================================================================
# API Keys
# =============================================================================

GROQ_API_KEY = ""  # Get from https://console.groq.com/keys (or set GROQ_API_KEY)

# =============================================================================
# Enrichment
# =============================================================================

ENRICHMENT_ENABLED = True                                   # Rephrase directives with the LLM
ENRICHMENT_ENDPOINT = "https://api.groq.com/openai/v1"      # OpenAI-compatible base URL
ENRICHMENT_MODEL = "llama-3.3-70b-versatile"
ENRICHMENT_TIMEOUT_S = 15.0           # Fall back to rule-based wording after this
ENRICHMENT_TEMPERATURE = 0.85
ENRICHMENT_MAX_TOKENS = 500

# =============================================================================
# Orchestration Cycle
# =============================================================================

CYCLE_COOLDOWN_S = 60.0               # Minimum seconds between pipeline runs per user

# =============================================================================
# Nudge Delivery
# =============================================================================

NUDGE_MAX_PER_DAY = 5                 # Max nudges per calendar day
NUDGE_MIN_INTERVAL_S = 1800           # Min seconds between nudges
NUDGE_DISMISS_COOLDOWN_S = 3600       # Quiet period after a dismissal
SNOOZE_DEFAULT_S = 300                # Default snooze delay

# =============================================================================
# Paths
# =============================================================================

DATA_DIR = "data"                     # Runtime data directory (SQLite state store)
