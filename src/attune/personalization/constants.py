"""Tuned constants for the personalization engine."""

from attune.contracts.profile import MotivationType
from attune.contracts.signals import TimeOfDay

# Baseline initializer
MOTIVATION_BONUS = {
    MotivationType.INTRINSIC: 0.15,
    MotivationType.MIXED: 0.08,
    MotivationType.EXTRINSIC: 0.0,
}

# SCS needed for strictness levels 1..5, ascending
STRICTNESS_THRESHOLDS = (0.20, 0.40, 0.55, 0.70, 0.85)

# (minimum baseline focus estimate, session minutes), highest bucket first
FOCUS_LENGTH_TIERS = (
    (0.65, 45.0),
    (0.35, 25.0),
    (0.0, 15.0),
)

# Beta-Binomial prior
BAYESIAN_PRIOR_ALPHA = 1.0
BAYESIAN_PRIOR_BETA = 1.0
RECENT_WINDOW_DAYS = 7
MIN_ATTEMPTS_FOR_TRUST = 5
MIN_RECENT_ATTEMPTS_FOR_TREND = 3
COMPLIANCE_TREND_DELTA = 0.10

# Strictness evolution
STRICTNESS_COOLDOWN_DAYS = 3
ESCALATE_COMPLIANCE_MIN = 0.75
ESCALATE_SESSION_SUCCESS_MIN = 0.80
ESCALATE_OVERRIDE_MAX = 0.40
DEESCALATE_OVERRIDE_MIN = 0.40
DEESCALATE_SESSION_SUCCESS_MAX = 0.45
AUTHORITY_RESISTANCE_CAP_THRESHOLD = 0.65
AUTHORITY_RESISTANCE_MAX_LEVEL = 3
MIN_STRICTNESS = 1
MAX_STRICTNESS = 5

# Override frequency moving average
OVERRIDE_EMA_KEEP_ON_OVERRIDE = 0.9
OVERRIDE_EMA_BUMP = 0.1
OVERRIDE_EMA_KEEP = 0.95

# Intervention fatigue
FATIGUE_PER_NUDGE = 0.10
FATIGUE_PER_DISMISSAL = 0.20
DISMISSAL_COMPOUND_MULTIPLIER = 1.5
FATIGUE_DAILY_DECAY_RATE = 0.40
HIGH_FATIGUE_THRESHOLD = 0.70
CRITICAL_FATIGUE_THRESHOLD = 0.90

# Nudge tone effectiveness pseudo-count
EFFECTIVENESS_PSEUDO_COUNT = 2.0
BASELINE_TONE_EFFECTIVENESS = 0.7
DEFAULT_TONE_EFFECTIVENESS = 0.5

# Intervention Suitability Score
ISS_WEIGHT_GOAL_CONFLICT = 0.40
ISS_WEIGHT_DISTRACTION = 0.35
ISS_WEIGHT_READINESS = 0.25
ISS_FOCUS_SESSION_BOOST = 0.15
ISS_REFLECTIVE_MAX = 0.35
ISS_SOFT_DELAY_MAX = 0.65
DELAY_READINESS_THRESHOLD = 0.25

TIME_MODIFIERS = {
    TimeOfDay.MORNING: 0.85,
    TimeOfDay.AFTERNOON: 1.0,
    TimeOfDay.EVENING: 1.15,
    TimeOfDay.NIGHT: 0.70,
}

# Policy tone buckets by emotional sensitivity
SUPPORTIVE_ESS_MIN = 0.6
CHALLENGE_ESS_MAX = 0.3

# Uninstall risk weights
UNINSTALL_OVERRIDE_WEIGHT = 0.30
UNINSTALL_FATIGUE_WEIGHT = 0.25
UNINSTALL_LOW_STREAK_PENALTY = 0.15
UNINSTALL_LOW_STREAK_DAYS = 3
UNINSTALL_LOW_COMPLIANCE_PENALTY = 0.20
UNINSTALL_LOW_COMPLIANCE_MAX = 0.3
UNINSTALL_AUTHORITY_WEIGHT = 0.10


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))
