# =============================================================================
# tests/test_templates.py - Compliance Template Catalog Tests
# =============================================================================
# Which obligations apply to which entity types and states.
# =============================================================================

import pytest

from core.compliance.templates import (
    COMPLIANCE_TEMPLATES,
    ComplianceTemplate,
    templates_for,
)
from core.models.business import EntityType
from core.models.compliance import EventCategory, Frequency, Priority
from core.models.notification import NotificationChannel


def event_types(entity_type, state):
    return [t.event_type for t in templates_for(entity_type, state)]


class TestTemplatesFor:
    """Template selection by entity type and state."""

    def test_delaware_llc(self):
        assert event_types("LLC", "DE") == [
            "tax_filing",
            "quarterly_taxes",
            "boir_filing",
            "de_llc_annual_tax",
            "business_license_renewal",
            "registered_agent_verification",
        ]

    def test_delaware_corporation_gets_franchise_tax(self):
        templates = templates_for(EntityType.CORPORATION, "DE")
        franchise = [t for t in templates if t.event_type == "franchise_tax"]

        assert len(franchise) == 1
        assert (franchise[0].month, franchise[0].day) == (3, 1)
        assert "corporate_tax_return" in [t.event_type for t in templates]
        assert "tax_filing" not in [t.event_type for t in templates]

    def test_state_is_case_insensitive(self):
        assert "ca_llc_fee" in event_types("LLC", "ca")

    def test_california_statement_of_information(self):
        llc = [t for t in templates_for("LLC", "CA") if t.event_type == "ca_statement_of_information"]
        corp = [t for t in templates_for("Corporation", "CA") if t.event_type == "ca_statement_of_information"]

        assert llc[0].frequency == Frequency.BIENNIAL
        assert llc[0].estimated_cost == 20
        assert corp[0].frequency == Frequency.ANNUAL
        assert corp[0].estimated_cost == 25

    def test_texas_s_corp(self):
        assert event_types("S-Corp", "TX") == [
            "s_corp_tax_return",
            "quarterly_taxes",
            "boir_filing",
            "franchise_tax",
            "business_license_renewal",
            "registered_agent_verification",
        ]

    def test_sole_proprietorship_only_renews_license(self):
        assert event_types("Sole Proprietorship", "CA") == ["business_license_renewal"]

    def test_unknown_entity_type_matches_nothing(self):
        assert templates_for("Partnership", "DE") == []

    def test_state_without_state_filings(self):
        """States outside the catalog still get federal and maintenance items."""
        types = event_types("LLC", "MT")
        assert "tax_filing" in types
        assert "annual_report" not in types

    def test_boir_links_to_fincen(self):
        boir = next(t for t in COMPLIANCE_TEMPLATES if t.event_type == "boir_filing")
        assert boir.filing_link == "https://boiefiling.fincen.gov/"
        assert not boir.is_recurring


class TestComplianceTemplate:
    """Template validation and defaults."""

    def test_defaults(self):
        template = ComplianceTemplate(
            event_type="x",
            title="X",
            description="X",
            category=EventCategory.OTHER,
            priority=Priority.LOW,
            frequency=Frequency.ANNUAL,
            rule="anniversary",
        )
        assert template.reminder_days == (30, 14, 7, 1)
        assert template.channels == (NotificationChannel.EMAIL, NotificationChannel.DASHBOARD)
        assert template.is_recurring

    def test_unknown_rule_rejected(self):
        with pytest.raises(ValueError, match="Unknown due date rule"):
            ComplianceTemplate(
                event_type="x",
                title="X",
                description="X",
                category=EventCategory.OTHER,
                priority=Priority.LOW,
                frequency=Frequency.ANNUAL,
                rule="whenever",
            )

    def test_fixed_rule_needs_month_and_day(self):
        with pytest.raises(ValueError, match="needs month and day"):
            ComplianceTemplate(
                event_type="x",
                title="X",
                description="X",
                category=EventCategory.OTHER,
                priority=Priority.LOW,
                frequency=Frequency.ANNUAL,
                rule="fixed",
                month=4,
            )

    def test_every_catalog_template_is_valid(self):
        for template in COMPLIANCE_TEMPLATES:
            assert template.reminder_days
            assert template.title


class TestNewYork:

    def test_corporations_owe_franchise_tax(self):
        event_types = [t.event_type for t in templates_for("C-Corp", "NY")]
        assert "franchise_tax" in event_types
        assert "ny_biennial_statement" in event_types

    def test_llcs_do_not(self):
        assert "franchise_tax" not in [t.event_type for t in templates_for("LLC", "NY")]
