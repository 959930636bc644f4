"""Onboarding profile contracts - the static input to personalization."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NudgeTone(str, Enum):
    """Voice used when addressing the user."""
    SUPPORTIVE = "supportive"
    SHARP = "sharp"
    CHALLENGE = "challenge"
    CONFIDENCE_BUILDING = "confidence_building"


class MotivationType(str, Enum):
    """Dominant motivation detected during onboarding."""
    INTRINSIC = "intrinsic"
    EXTRINSIC = "extrinsic"
    MIXED = "mixed"


class GoalCategory(str, Enum):
    """Broad category of the user's stated goal."""
    CAREER = "career"
    ACADEMIC = "academic"
    HEALTH = "health"
    CREATIVE = "creative"
    FINANCIAL = "financial"
    PERSONAL = "personal"
    OTHER = "other"


class DistractionCategory(str, Enum):
    """What typically pulls the user away from their goal."""
    SOCIAL_MEDIA = "social_media"
    GAMING = "gaming"
    MENTAL_RUMINATION = "mental_rumination"
    SOCIAL_INTERACTION = "social_interaction"
    FATIGUE = "fatigue"
    OTHER = "other"


class BigFiveScores(BaseModel):
    """Big-Five personality traits on a 1-7 Likert scale."""

    conscientiousness: float = Field(default=4.0, ge=1.0, le=7.0)
    neuroticism: float = Field(default=4.0, ge=1.0, le=7.0)
    openness: float = Field(default=4.0, ge=1.0, le=7.0)
    agreeableness: float = Field(default=4.0, ge=1.0, le=7.0)
    extraversion: float = Field(default=4.0, ge=1.0, le=7.0)


class ResponsePredictionMatrix(BaseModel):
    """Predicted probability of compliance per intervention kind."""

    reflective: float = Field(default=0.5, ge=0.0, le=1.0)
    soft_delay: float = Field(default=0.5, ge=0.0, le=1.0)
    hard_block: float = Field(default=0.5, ge=0.0, le=1.0)


class OnboardingProfile(BaseModel):
    """Output of the onboarding questionnaire and text analysis.

    Produced once by the onboarding collaborator. All scores are assumed
    pre-validated; the pydantic bounds only guard against programming errors.
    """

    big_five: BigFiveScores = Field(default_factory=BigFiveScores)

    # Computed behavioral scores
    impulsivity_index: float = Field(default=0.5, ge=0.0, le=1.0)
    authority_resistance_score: float = Field(default=0.3, ge=0.0, le=1.0)
    strictness_compatibility: float = Field(
        default=0.5,
        ge=0.0, le=1.0,
        description="Strictness compatibility score (SCS)"
    )
    uninstall_risk_probability: float = Field(default=0.3, ge=0.0, le=1.0)

    # Motivation & goal
    motivation_type: MotivationType = MotivationType.MIXED
    goal_category: GoalCategory = GoalCategory.PERSONAL
    goal_urgency_score: float = Field(default=0.5, ge=0.0, le=1.0)

    # Emotional & self-efficacy
    emotional_reactivity_score: float = Field(default=0.5, ge=0.0, le=1.0)
    self_efficacy_score: float = Field(default=0.5, ge=0.0, le=1.0)

    # Distraction
    distraction_type_vector: dict[DistractionCategory, float] = Field(
        default_factory=dict,
        description="Distraction category -> weight"
    )

    predicted_response_matrix: ResponsePredictionMatrix = Field(
        default_factory=ResponsePredictionMatrix
    )
    baseline_focus_estimate: float = Field(default=0.5, ge=0.0, le=1.0)
    nudge_tone: NudgeTone = NudgeTone.SUPPORTIVE

    # Free text, only used to personalize enrichment prompts
    goal_text: str = ""
    ideal_future_self: str = ""
    self_identified_weakness: str = ""
    primary_distraction_text: str = ""

    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def primary_distraction(self) -> DistractionCategory:
        """Strongest distraction category (social media when unknown)."""
        if not self.distraction_type_vector:
            return DistractionCategory.SOCIAL_MEDIA
        return max(self.distraction_type_vector.items(), key=lambda x: x[1])[0]
