"""Default configuration values for Attune."""

# API Keys (override in config.py or via the GROQ_API_KEY environment variable)
GROQ_API_KEY = ""

# Enrichment (optional natural-language rephrasing of directives)
ENRICHMENT_ENABLED: bool = True
ENRICHMENT_ENDPOINT: str = "https://api.groq.com/openai/v1"
ENRICHMENT_MODEL: str = "llama-3.3-70b-versatile"
ENRICHMENT_TIMEOUT_S: float = 15.0
ENRICHMENT_TEMPERATURE: float = 0.85
ENRICHMENT_MAX_TOKENS: int = 500

# Orchestration cycle
CYCLE_COOLDOWN_S: float = 60.0

# Nudge rate limiting
NUDGE_MAX_PER_DAY: int = 5
NUDGE_MIN_INTERVAL_S: float = 30 * 60
NUDGE_DISMISS_COOLDOWN_S: float = 60 * 60
SNOOZE_DEFAULT_S: float = 5 * 60

# Paths
DATA_DIR: str = "data"

# All configurable keys (for validation)
CONFIG_KEYS = {
    "GROQ_API_KEY",
    "ENRICHMENT_ENABLED",
    "ENRICHMENT_ENDPOINT",
    "ENRICHMENT_MODEL",
    "ENRICHMENT_TIMEOUT_S",
    "ENRICHMENT_TEMPERATURE",
    "ENRICHMENT_MAX_TOKENS",
    "CYCLE_COOLDOWN_S",
    "NUDGE_MAX_PER_DAY",
    "NUDGE_MIN_INTERVAL_S",
    "NUDGE_DISMISS_COOLDOWN_S",
    "SNOOZE_DEFAULT_S",
    "DATA_DIR",
}
