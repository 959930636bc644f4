"""Signal contracts - ephemeral inputs supplied by collaborators each cycle."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from attune.contracts.state import InterventionType, SessionSnapshot

__all__ = [
    "TimeOfDay",
    "ComplianceEvent",
    "SessionSnapshot",
    "PersonalizationContext",
    "HealthSnapshot",
    "MeditationSummary",
    "ActivitySnapshot",
    "CollaboratorSignals",
]


class TimeOfDay(str, Enum):
    """Coarse time-of-day bucket."""
    MORNING = "morning"
    AFTERNOON = "afternoon"
    EVENING = "evening"
    NIGHT = "night"

    @classmethod
    def from_hour(cls, hour: int) -> "TimeOfDay":
        if 5 <= hour < 12:
            return cls.MORNING
        if 12 <= hour < 17:
            return cls.AFTERNOON
        if 17 <= hour < 21:
            return cls.EVENING
        return cls.NIGHT


class ComplianceEvent(BaseModel):
    """The user's response to one intervention."""

    model_config = {"frozen": True}

    timestamp: datetime = Field(default_factory=datetime.now)
    intervention_type: InterventionType
    was_successful: bool = Field(description="Did the user comply?")
    was_override: bool = Field(default=False, description="Did the user force past it?")
    app_package: str | None = None
    session_duration_minutes: float | None = Field(default=None, ge=0.0)


class PersonalizationContext(BaseModel):
    """Real-time context for one decision cycle."""

    model_config = {"frozen": True}

    time_of_day: TimeOfDay = TimeOfDay.AFTERNOON
    hour_of_day: int = Field(default=14, ge=0, le=23)
    cognitive_readiness_score: float = Field(default=0.5, ge=0.0, le=1.0)
    recent_afi: float = Field(
        default=0.5,
        ge=0.0, le=1.0,
        description="Attention fragmentation index"
    )
    goal_conflict: float = Field(default=0.0, ge=0.0, le=1.0)
    distraction_severity: float = Field(default=0.0, ge=0.0, le=1.0)
    is_in_focus_session: bool = False
    stress_proxy: float = Field(default=0.3, ge=0.0, le=1.0)
    goal_urgency: float = Field(default=0.5, ge=0.0, le=1.0)
    current_app: str | None = None


class HealthSnapshot(BaseModel):
    """Latest daily record from the health collaborator.

    Cognitive readiness itself arrives on ``PersonalizationContext``.
    """

    hrv_rmssd_ms: float | None = None
    hrv_normalized: float = Field(default=0.5, ge=0.0, le=1.0)
    stress_level: int = Field(default=2, ge=1, le=5)
    fatigue_level: int = Field(default=2, ge=1, le=5)
    sleep_hours: float = Field(default=7.0, ge=0.0)
    sleep_quality: int = Field(default=3, ge=1, le=5)
    health_flags: list[str] = Field(default_factory=list)


class MeditationSummary(BaseModel):
    """Aggregate meditation history."""

    session_count: int = Field(default=0, ge=0)
    total_minutes: float = Field(default=0.0, ge=0.0)
    average_rating: float = Field(default=3.0, ge=0.0, le=5.0)
    last_type: str | None = None
    suitability: float = Field(default=50.0, ge=0.0, le=100.0)


class ActivitySnapshot(BaseModel):
    """Today's focus activity, as tracked by the usage collaborator."""

    completed_sessions_today: int = Field(default=0, ge=0)
    active_goal_name: str | None = None
    distractive_app_names: list[str] = Field(default_factory=list)


class CollaboratorSignals(BaseModel):
    """Optional collaborator outputs; anything missing falls back to defaults."""

    health: HealthSnapshot | None = None
    meditation: MeditationSummary | None = None
    activity: ActivitySnapshot | None = None
