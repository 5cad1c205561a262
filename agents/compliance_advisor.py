# =============================================================================
# agents/compliance_advisor.py - Compliance Advisor Agent
# =============================================================================
# Produces step-by-step filing guidance for one compliance event.
#
# Flow:
# 1. Build a system prompt from the business and the event
# 2. Call OpenAI in JSON mode
# 3. Validate the result as FilingGuidance (pydantic)
#
# Usage:
#   from agents.compliance_advisor import ComplianceAdvisor
#   guidance = ComplianceAdvisor().advise(event, business)
# =============================================================================

from __future__ import annotations

import json
import logging
from typing import Any

from openai import OpenAI
from pydantic import ValidationError

from app.config import settings
from agents.models.guidance import FilingGuidance
from agents.prompts.advisor_system import build_advisor_prompt
from core.models.business import BusinessEntity
from core.models.compliance import ComplianceEvent
from lib.utils import ApplicationError

# Set up logging for this module
logger = logging.getLogger(__name__)


class AdvisorError(ApplicationError):
    """
    Error while producing filing guidance.

    Attributes:
        code: OPENAI_NOT_CONFIGURED, OPENAI_ERROR, JSON_PARSE_ERROR or
            VALIDATION_ERROR
    """

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("code", "ADVISOR_ERROR")
        super().__init__(message, **kwargs)


class ComplianceAdvisor:
    """
    Compliance Advisor agent.

    Attributes:
        model: OpenAI model to use (default from settings)
        temperature: Generation temperature (default from settings)
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        client: OpenAI | None = None,
    ):
        if client is None and not settings.OPENAI_API_KEY:
            raise AdvisorError(
                "Filing guidance is not configured",
                code="OPENAI_NOT_CONFIGURED",
                suggestion="Set OPENAI_API_KEY in your .env file",
            )
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.ADVISOR_TEMPERATURE

    def advise(self, event: ComplianceEvent, business: BusinessEntity) -> FilingGuidance:
        """
        Explain how to complete one event.

        Raises:
            AdvisorError: If the OpenAI call fails or returns unusable output
        """
        prompt = build_advisor_prompt(
            legal_name=business.legal_name,
            entity_type=business.entity_type,
            state=business.state,
            event_title=event.event_title,
            event_type=event.event_type,
            category=event.category,
            due_date=event.due_date.isoformat(),
            event_description=event.event_description,
            estimated_cost=event.estimated_cost,
            filing_link=event.filing_link,
        )
        messages = [
            {"role": "system", "content": prompt},
            {"role": "user", "content": f"How do I complete '{event.event_title}'?"},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},  # Force JSON output
                messages=messages,
            )
            response_text = response.choices[0].message.content or ""
            logger.debug(f"OpenAI response: {response_text[:200]}...")

        except Exception as e:
            raise AdvisorError(
                f"OpenAI API call failed: {e}",
                code="OPENAI_ERROR",
                suggestion="Check your OPENAI_API_KEY and network connection",
                details={"model": self.model},
            )

        guidance = self._parse_response(response_text)
        logger.info(f"Guidance created for event {event.id} ({len(guidance.steps)} steps)")
        return guidance

    def _parse_response(self, response_text: str) -> FilingGuidance:
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            raise AdvisorError(
                f"Invalid JSON response from model: {e}",
                code="JSON_PARSE_ERROR",
                suggestion="Try again; the model did not return valid JSON",
                details={"raw_response": response_text[:500]},
            )

        try:
            return FilingGuidance.model_validate(data)
        except ValidationError as e:
            errors = [f"{err['loc']}: {err['msg']}" for err in e.errors()]
            raise AdvisorError(
                f"Invalid guidance structure: {'; '.join(errors)}",
                code="VALIDATION_ERROR",
                suggestion="The model's response was valid JSON but missing required fields",
                details={"raw_data": data},
            )
