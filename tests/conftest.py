# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides sample Supabase rows (business, user, calendar event)
#
# Database access is never real: service tests patch the SupabaseClient
# class methods they rely on.
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("COMPLIANCE_TIMEZONE", "America/New_York")
os.environ.setdefault("REMINDER_INTERVALS", "30,14,7,1")

from datetime import date

import pytest


# =============================================================================
# Fixtures
# =============================================================================

OWNER_ID = "11111111-1111-1111-1111-111111111111"


@pytest.fixture
def owner_id():
    return OWNER_ID


@pytest.fixture
def business_row():
    """A business_entities row as Supabase returns it."""
    return {
        "id": 42,
        "user_id": OWNER_ID,
        "name": "Acme Widgets LLC",
        "entity_type": "LLC",
        "state": "DE",
        "status": "active",
        "filed_date": "2024-03-10T00:00:00+00:00",
        "industry": "Manufacturing",
        "contact_email": "contact@acme.test",
        "contact_phone": None,
        "created_at": "2024-03-10T14:00:00+00:00",
    }


@pytest.fixture
def user_row():
    """A users row for the business owner."""
    return {
        "id": OWNER_ID,
        "email": "jane.owner@acme.test",
        "first_name": "Jane",
        "last_name": "Owner",
        "phone": None,
        "role": "client",
    }


@pytest.fixture
def make_event_row():
    """Factory for compliance_calendar rows; override any column by keyword."""

    def _make(**overrides):
        row = {
            "id": 7,
            "business_entity_id": 42,
            "event_type": "annual_report",
            "event_title": "Annual Report Filing",
            "event_description": "File your annual report with the Secretary of State.",
            "due_date": "2025-06-01",
            "reminder_dates": '["2025-05-02", "2025-05-18", "2025-05-25", "2025-05-31"]',
            "is_recurring": True,
            "recurring_interval": "annual",
            "status": "pending",
            "completed_date": None,
            "priority": "high",
            "category": "state_filing",
            "estimated_cost": 300,
            "filing_link": None,
            "notes": None,
            "document_path": None,
            "reminders_sent": 0,
            "last_reminder_sent": None,
            "last_reminder_interval": None,
            "created_at": "2025-01-05T12:00:00+00:00",
        }
        row.update(overrides)
        return row

    return _make


@pytest.fixture
def today():
    return date(2025, 5, 2)
