"""
Domain enums for the news platform.
Contains all enumeration types used across the preference models.
"""

import enum


class PoliticalPerspective(str, enum.Enum):
    """Political framing applied to generated articles"""

    CONSERVATIVE = "conservative"
    LIBERAL = "liberal"
    DEMOCRATIC = "democratic"
    PROGRESSIVE = "progressive"
    NEUTRAL = "neutral"


class WritingTone(str, enum.Enum):
    """Writing tone of generated articles"""

    FORMAL = "formal"
    CASUAL = "casual"
    ANALYTICAL = "analytical"
    CONVERSATIONAL = "conversational"
    PROFESSIONAL = "professional"


class Language(str, enum.Enum):
    """Supported article languages"""

    EN = "en"
    ES = "es"
    FR = "fr"
    DE = "de"
    IT = "it"
    PT = "pt"


class AIModel(str, enum.Enum):
    """Content generation model providers"""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"
    GROK = "grok"
    LOCAL = "local"


class PropagandaSensitivity(str, enum.Enum):
    """How aggressively propaganda detection flags content"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Values a brand new preference record starts with (internal column names).
DEFAULT_PREFERENCES = {
    "perspective": PoliticalPerspective.NEUTRAL,
    "tone": WritingTone.PROFESSIONAL,
    "language": Language.EN,
    "ai_model": AIModel.OPENAI,
    "fact_checking_enabled": True,
    "propaganda_detection_enabled": True,
    "propaganda_sensitivity": PropagandaSensitivity.MEDIUM,
}
