"""The fixed questionnaire behind every strategy sheet.

Order matters: it is the order questions are asked, the order errors are
reported in, and the order of the answer template written by the CLI.
"""
from pydantic import BaseModel, ConfigDict


class FieldSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    placeholder: str = ""
    options: tuple[str, ...] = ()  # offered choices; stored as free text, not enforced
    required: bool = True


GOAL_OPTIONS = (
    "Leads & Sales",
    "Going Viral & Brand Awareness",
    "Collaborations & PR",
    "Boost Engagement",
)

CONTENT_TYPE_OPTIONS = (
    "Long form video",
    "Short form video",
    "Photos",
    "Graphics",
)

FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec(name="business", label="1. Tell me about your business:",
              placeholder="e.g., Online fitness coaching"),
    FieldSpec(name="goal", label="2. Main goal for social media:", options=GOAL_OPTIONS),
    FieldSpec(name="audience", label="3. Target audience:",
              placeholder="e.g., 25-35yo women interested in wellness"),
    FieldSpec(name="problem", label="4. Biggest problem you solve:",
              placeholder="e.g., Lack of time for healthy meals"),
    FieldSpec(name="unique", label="5. What makes you unique?",
              placeholder="e.g., 10-min workout plans"),
    FieldSpec(name="contentType", label="6. Favorite content type:", options=CONTENT_TYPE_OPTIONS),
    FieldSpec(name="platforms", label="7. Preferred platforms (e.g., Instagram, TikTok):",
              placeholder="e.g., Instagram, TikTok"),
    FieldSpec(name="products", label="8. Products/services to focus on:",
              placeholder="e.g., Meal plans, coaching sessions"),
    FieldSpec(name="niche", label="9. Your niche and competitors:",
              placeholder="e.g., Fitness, competitors: Fitbit, Peloton"),
    FieldSpec(name="logo", label="Upload your logo (optional):", required=False),
)

REQUIRED_FIELDS: tuple[str, ...] = tuple(f.name for f in FIELDS if f.required)

FIELD_NAMES: tuple[str, ...] = tuple(f.name for f in FIELDS)


def field_spec(name: str) -> FieldSpec:
    """Return the FieldSpec for ``name``. Raises KeyError for unknown fields."""
    for spec in FIELDS:
        if spec.name == name:
            return spec
    raise KeyError(name)
