# =============================================================================
# agents/models/ - Agent Output Schemas
# =============================================================================
# Pydantic models that validate what the agents produce:
# - guidance.py: FilingGuidance (Compliance Advisor output)
# =============================================================================

from agents.models.guidance import FilingGuidance, FilingStep

__all__ = [
    "FilingGuidance",
    "FilingStep",
]
