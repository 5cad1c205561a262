# =============================================================================
# agents/ - AI Agent Definitions
# =============================================================================
# This package contains the AI helpers of the compliance desk:
# - compliance_advisor.py: Explains how to complete one compliance filing
#
# Models:
# - models/guidance.py: FilingGuidance schema (advisor output)
#
# Prompts:
# - prompts/advisor_system.py: System prompt for the advisor
# =============================================================================

from agents.compliance_advisor import AdvisorError, ComplianceAdvisor
from agents.models.guidance import FilingGuidance, FilingStep

__all__ = [
    "AdvisorError",
    "ComplianceAdvisor",
    "FilingGuidance",
    "FilingStep",
]
