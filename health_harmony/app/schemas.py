from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

STANDARD_DISCLAIMER = (
    "This app is not a substitute for medical advice. Always consult with a qualified healthcare "
    "professional before making any decisions about your health, medication, or diet."
)
URGENT_DISCLAIMER = (
    "This is NOT medical advice. If you have taken something you are concerned about, contact your "
    "doctor, pharmacist, or local emergency services immediately."
)
TIPS_DISCLAIMER = (
    "These are general tips and not medical advice. Always consult with a qualified healthcare "
    "professional for personalized guidance regarding your health and wellness."
)


class CamelModel(BaseModel):
    """Snake-case attributes in Python, camelCase on the wire and in model prompts."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Category(str, Enum):
    ALLERGIES = "allergies"
    MEDICATIONS = "medications"
    CONDITIONS = "conditions"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    Category.ALLERGIES: "Allergies",
    Category.MEDICATIONS: "Current Medications",
    Category.CONDITIONS: "Medical Conditions",
}


class RiskLevel(str, Enum):
    NONE = "None"
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _RISK_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank >= other.rank


_RISK_ORDER = [RiskLevel.NONE, RiskLevel.LOW, RiskLevel.MODERATE, RiskLevel.HIGH]


def dedupe_items(items: List[str]) -> List[str]:
    """Strip entries, drop blanks and keep the first of any case-insensitive duplicates."""
    seen = set()
    result = []
    for item in items:
        value = item.strip()
        if not value or value.lower() in seen:
            continue
        seen.add(value.lower())
        result.append(value)
    return result


class UserProfile(CamelModel):
    allergies: List[str] = Field(default_factory=list, description="The user's allergies.")
    medications: List[str] = Field(default_factory=list, description="The user's current medications.")
    conditions: List[str] = Field(default_factory=list, description="The user's pre-existing medical conditions.")

    @field_validator("allergies", "medications", "conditions")
    @classmethod
    def _unique_items(cls, value: List[str]) -> List[str]:
        return dedupe_items(value)

    def items(self, category: Category) -> List[str]:
        return getattr(self, category.value)

    def is_empty(self) -> bool:
        return not (self.allergies or self.medications or self.conditions)


# ---- flow inputs ----

class ValidateProfileItemInput(CamelModel):
    category: Category
    item_name: str


class GetSuggestionsInput(CamelModel):
    category: Category
    query: str


class CheckItemCompatibilityInput(CamelModel):
    user_profile: UserProfile = Field(default_factory=UserProfile)
    item_name: str = ""
    photo_data_uris: List[str] = Field(
        default_factory=list,
        description="Optional photos of the item as 'data:<mimetype>;base64,<encoded_data>' URIs.",
    )


class SuggestAlternativesInput(CamelModel):
    user_profile: UserProfile = Field(default_factory=UserProfile)
    item_name: str


class GetPostIngestionAdviceInput(CamelModel):
    user_profile: UserProfile = Field(default_factory=UserProfile)
    item_name: str


class GetLifestyleTipsInput(CamelModel):
    user_profile: UserProfile = Field(default_factory=UserProfile)


# ---- flow outputs ----

class ValidationResult(CamelModel):
    is_valid: bool = Field(..., description="Whether the item is a valid, real term for the given category.")


class SuggestionsResult(CamelModel):
    suggestions: List[str] = Field(default_factory=list, description="A list of autocomplete suggestions.")


class CompatibilityAssessment(CamelModel):
    is_valid_item: bool = Field(
        ...,
        description=(
            "Whether the provided item name/photo appears to be a valid drug, supplement, or food item. "
            "It should be false for gibberish or non-consumable items."
        ),
    )
    risk_level: Optional[RiskLevel] = Field(
        None,
        description=(
            'The assessed risk level for the user. "None" if it appears safe, "Low" for minor considerations, '
            '"Moderate" for notable interactions, "High" for significant contraindications. Omit when the item is not valid.'
        ),
    )
    analysis: Optional[str] = Field(
        None,
        description="The analysis of the item's compatibility with the user's health profile. Omit when the item is not valid.",
    )

    @model_validator(mode="after")
    def _valid_items_carry_assessment(self):
        if not self.is_valid_item:
            self.risk_level = None
            self.analysis = None
            return self
        if self.risk_level is None:
            raise ValueError("riskLevel is required when isValidItem is true")
        if not (self.analysis or "").strip():
            raise ValueError("analysis must be non-empty when isValidItem is true")
        return self


class CompatibilityResult(CompatibilityAssessment):
    disclaimer: str = STANDARD_DISCLAIMER


class Alternative(CamelModel):
    name: str = Field(..., min_length=1, description="The name of the alternative item.")
    reason: str = Field(..., min_length=1, description="Why this alternative is likely safer for this user.")


class AlternativesResult(CamelModel):
    alternatives: List[Alternative] = Field(
        ..., min_length=2, description="Two or three suggested safer alternatives."
    )


class PostIngestionAdvice(CamelModel):
    advice: str = Field(
        ...,
        min_length=1,
        description=(
            "General guidance on what to monitor for and when to seek immediate medical attention. "
            "This is not medical advice."
        ),
    )


class AdviceResult(PostIngestionAdvice):
    disclaimer: str = URGENT_DISCLAIMER


class LifestyleTip(CamelModel):
    category: str = Field(
        ...,
        min_length=1,
        description='The category of the tip (e.g., "Dietary Advice", "Exercise Recommendations", "Home Environment").',
    )
    tip: str = Field(..., min_length=1, description="The specific lifestyle tip.")


class LifestyleTips(CamelModel):
    tips: List[LifestyleTip] = Field(..., min_length=3, description="Three to five lifestyle tips.")


class LifestyleTipsResult(LifestyleTips):
    disclaimer: str = TIPS_DISCLAIMER


# ---- API payloads ----

class Notification(CamelModel):
    title: str
    description: str = ""
    variant: str = Field("default", pattern="^(default|destructive)$")


class AddItemRequest(CamelModel):
    item: str


class QueryRequest(CamelModel):
    query: str


class SessionCheckRequest(CamelModel):
    item_name: str = ""
    photo_data_uris: List[str] = Field(default_factory=list)


class Credentials(CamelModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class AuthUser(CamelModel):
    id: str
    email: str


class AuthStatus(CamelModel):
    configured: bool
    authenticated: bool
    email: Optional[str] = None
