# =============================================================================
# agents/models/guidance.py - Filing Guidance Schema
# =============================================================================
# Contract between the Compliance Advisor agent and the API.
# The model's JSON output is validated against FilingGuidance.
# =============================================================================

from pydantic import BaseModel, Field, field_validator


class FilingStep(BaseModel):
    """One step of a filing walkthrough."""
    title: str = Field(..., min_length=1, max_length=200)
    detail: str = Field(default="", max_length=1000)


class FilingGuidance(BaseModel):
    """
    How to complete one compliance event.

    Example:
        {
            "summary": "Delaware LLCs pay a flat $300 annual tax by June 1.",
            "steps": [
                {"title": "Log in to the Delaware tax portal", "detail": "..."},
                {"title": "Pay the $300 annual tax", "detail": "..."}
            ],
            "documents_needed": ["Delaware file number"],
            "estimated_time": "15 minutes",
            "risk_if_missed": "$200 late penalty plus 1.5% monthly interest"
        }
    """
    summary: str = Field(..., min_length=1, max_length=1000)
    steps: list[FilingStep] = Field(default_factory=list, max_length=15)
    documents_needed: list[str] = Field(default_factory=list)
    estimated_time: str | None = None
    risk_if_missed: str | None = None

    @field_validator("steps", mode="before")
    @classmethod
    def _plain_steps(cls, value):
        # Models sometimes return steps as plain strings
        if isinstance(value, list):
            return [{"title": v} if isinstance(v, str) else v for v in value]
        return value
