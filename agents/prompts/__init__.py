# =============================================================================
# agents/prompts/ - System Prompts for AI Agents
# =============================================================================
# This package contains system prompts for each agent:
# - advisor_system.py: Compliance Advisor prompt
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.advisor_system import (
    ADVISOR_SYSTEM_PROMPT,
    build_advisor_prompt,
)

__all__ = [
    "ADVISOR_SYSTEM_PROMPT",
    "build_advisor_prompt",
]
