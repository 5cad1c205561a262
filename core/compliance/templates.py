# =============================================================================
# core/compliance/templates.py - Compliance Requirement Catalog
# =============================================================================
# Every recurring obligation a formed business can owe, described as data.
# A template says WHO owes it (entity types / states), WHEN it is due
# (a due date rule, see deadlines.due_dates_for) and HOW to remind.
#
# Usage:
#   from core.compliance.templates import templates_for
#   for template in templates_for("LLC", "CA"):
#       print(template.title)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field

from core.models.business import EntityType
from core.models.compliance import EventCategory, Frequency, Priority
from core.models.notification import NotificationChannel


OPERATING_ENTITIES = (
    EntityType.LLC,
    EntityType.CORPORATION,
    EntityType.S_CORP,
    EntityType.C_CORP,
    EntityType.PROFESSIONAL_CORPORATION,
)

CORPORATE_ENTITIES = (
    EntityType.CORPORATION,
    EntityType.S_CORP,
    EntityType.C_CORP,
    EntityType.PROFESSIONAL_CORPORATION,
)

DEFAULT_REMINDER_DAYS = (30, 14, 7, 1)
DEFAULT_CHANNELS = (NotificationChannel.EMAIL, NotificationChannel.DASHBOARD)

DUE_DATE_RULES = {
    "fixed",
    "anniversary",
    "anniversary_month_end",
    "anniversary_month_start",
    "days_from_formation",
    "quarterly_estimated",
    "boir",
}


@dataclass(frozen=True)
class ComplianceTemplate:
    """
    One compliance obligation.

    Attributes:
        event_type: Machine-readable type stored on the calendar row
        title / description: Shown on the calendar and in reminders
        rule: Due date rule name (see DUE_DATE_RULES)
        entity_types: Entity types that owe it (None = every type)
        states: States where it applies (None = every state)
        month / day: For the "fixed" rule
        days_from_formation: For the "days_from_formation" rule
        reminder_days: Days before due to schedule notifications
        channels: Delivery channels for scheduled notifications
    """
    event_type: str
    title: str
    description: str
    category: EventCategory
    priority: Priority
    frequency: Frequency
    rule: str
    entity_types: tuple[EntityType, ...] | None = None
    states: tuple[str, ...] | None = None
    month: int | None = None
    day: int | None = None
    days_from_formation: int | None = None
    estimated_cost: float | None = None
    filing_link: str | None = None
    reminder_days: tuple[int, ...] = DEFAULT_REMINDER_DAYS
    channels: tuple[NotificationChannel, ...] = field(default=DEFAULT_CHANNELS)

    def __post_init__(self):
        if self.rule not in DUE_DATE_RULES:
            raise ValueError(f"Unknown due date rule '{self.rule}' for {self.event_type}")
        if self.rule == "fixed" and (self.month is None or self.day is None):
            raise ValueError(f"Template {self.event_type} needs month and day for the fixed rule")

    @property
    def is_recurring(self) -> bool:
        return self.frequency != Frequency.ONE_TIME

    def applies_to(self, entity_type: EntityType | str, state: str) -> bool:
        """True when a business of this type and state owes the obligation."""
        try:
            entity_type = EntityType(entity_type)
        except ValueError:
            return False
        if self.entity_types is not None and entity_type not in self.entity_types:
            return False
        if self.states is not None and (state or "").upper() not in self.states:
            return False
        return True


# =============================================================================
# Federal Requirements
# =============================================================================

FEDERAL_TEMPLATES = [
    ComplianceTemplate(
        event_type="tax_filing",
        title="Annual Income Tax Return Filing",
        description="File the federal income tax return for your LLC with the IRS.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=4,
        day=15,
        entity_types=(EntityType.LLC,),
    ),
    ComplianceTemplate(
        event_type="corporate_tax_return",
        title="Corporate Tax Return (Form 1120)",
        description="File your corporate tax return with the IRS.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=3,
        day=15,
        entity_types=(EntityType.CORPORATION, EntityType.C_CORP, EntityType.PROFESSIONAL_CORPORATION),
        reminder_days=(60, 30, 14, 7, 1),
    ),
    ComplianceTemplate(
        event_type="s_corp_tax_return",
        title="S Corporation Tax Return (Form 1120-S)",
        description="File Form 1120-S and issue Schedule K-1s to shareholders.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=3,
        day=15,
        entity_types=(EntityType.S_CORP,),
        reminder_days=(60, 30, 14, 7, 1),
    ),
    ComplianceTemplate(
        event_type="quarterly_taxes",
        title="Quarterly Estimated Tax Payment",
        description="Submit quarterly estimated tax payments to the IRS.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.QUARTERLY,
        rule="quarterly_estimated",
        entity_types=OPERATING_ENTITIES,
        reminder_days=(14, 7, 1),
    ),
    ComplianceTemplate(
        event_type="boir_filing",
        title="Beneficial Ownership Information Report",
        description="File your BOIR with FinCEN as required by the Corporate Transparency Act.",
        category=EventCategory.COMPLIANCE,
        priority=Priority.HIGH,
        frequency=Frequency.ONE_TIME,
        rule="boir",
        entity_types=OPERATING_ENTITIES,
        filing_link="https://boiefiling.fincen.gov/",
        reminder_days=(60, 30, 14, 7, 1),
    ),
]


# =============================================================================
# State-Specific Requirements
# =============================================================================

STATE_TEMPLATES = [
    ComplianceTemplate(
        event_type="annual_report",
        title="Annual Report Filing",
        description="File your annual report with the Secretary of State.",
        category=EventCategory.STATE_FILING,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="anniversary_month_end",
        entity_types=OPERATING_ENTITIES,
        states=("GA", "IL", "MI", "NC", "OH", "PA"),
    ),
    # Delaware
    ComplianceTemplate(
        event_type="de_llc_annual_tax",
        title="Delaware LLC Annual Tax",
        description="Pay the flat annual tax for Delaware LLCs to the Division of Corporations.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=6,
        day=1,
        entity_types=(EntityType.LLC,),
        states=("DE",),
        estimated_cost=300,
        filing_link="https://corp.delaware.gov/paytaxes/",
    ),
    ComplianceTemplate(
        event_type="franchise_tax",
        title="Delaware Annual Report & Franchise Tax",
        description="File the annual franchise tax report and pay franchise tax to Delaware.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=3,
        day=1,
        entity_types=CORPORATE_ENTITIES,
        states=("DE",),
        estimated_cost=225,
        filing_link="https://corp.delaware.gov/paytaxes/",
    ),
    # California
    ComplianceTemplate(
        event_type="ca_llc_fee",
        title="California LLC Annual Tax",
        description="Pay the $800 annual LLC tax to the California Franchise Tax Board.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=4,
        day=15,
        entity_types=(EntityType.LLC,),
        states=("CA",),
        estimated_cost=800,
        filing_link="https://www.ftb.ca.gov/pay/",
    ),
    ComplianceTemplate(
        event_type="franchise_tax",
        title="California Minimum Franchise Tax",
        description="Pay the minimum franchise tax to the California Franchise Tax Board.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=4,
        day=15,
        entity_types=CORPORATE_ENTITIES,
        states=("CA",),
        estimated_cost=800,
        filing_link="https://www.ftb.ca.gov/pay/",
    ),
    ComplianceTemplate(
        event_type="ca_statement_of_information",
        title="California Statement of Information",
        description="File the biennial Statement of Information with the California Secretary of State.",
        category=EventCategory.STATE_FILING,
        priority=Priority.HIGH,
        frequency=Frequency.BIENNIAL,
        rule="anniversary_month_end",
        entity_types=(EntityType.LLC,),
        states=("CA",),
        estimated_cost=20,
        filing_link="https://bizfileonline.sos.ca.gov/",
    ),
    ComplianceTemplate(
        event_type="ca_statement_of_information",
        title="California Statement of Information",
        description="File the annual Statement of Information with the California Secretary of State.",
        category=EventCategory.STATE_FILING,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="anniversary_month_end",
        entity_types=CORPORATE_ENTITIES,
        states=("CA",),
        estimated_cost=25,
        filing_link="https://bizfileonline.sos.ca.gov/",
    ),
    # Texas
    ComplianceTemplate(
        event_type="franchise_tax",
        title="Texas Franchise Tax & Public Information Report",
        description="File the franchise tax report and Public Information Report with the Texas Comptroller.",
        category=EventCategory.TAX,
        priority=Priority.MEDIUM,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=5,
        day=15,
        entity_types=OPERATING_ENTITIES,
        states=("TX",),
        estimated_cost=0,
        filing_link="https://comptroller.texas.gov/taxes/franchise/",
    ),
    # Florida
    ComplianceTemplate(
        event_type="annual_report",
        title="Florida Annual Report",
        description="File the annual report with the Florida Division of Corporations (Sunbiz).",
        category=EventCategory.STATE_FILING,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=5,
        day=1,
        entity_types=(EntityType.LLC,),
        states=("FL",),
        estimated_cost=138.75,
        filing_link="https://dos.myflorida.com/sunbiz/",
    ),
    ComplianceTemplate(
        event_type="annual_report",
        title="Florida Annual Report",
        description="File the annual report with the Florida Division of Corporations (Sunbiz).",
        category=EventCategory.STATE_FILING,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=5,
        day=1,
        entity_types=CORPORATE_ENTITIES,
        states=("FL",),
        estimated_cost=150,
        filing_link="https://dos.myflorida.com/sunbiz/",
    ),
    # New York
    ComplianceTemplate(
        event_type="ny_biennial_statement",
        title="New York Biennial Statement",
        description="File the biennial statement with the New York Department of State.",
        category=EventCategory.STATE_FILING,
        priority=Priority.MEDIUM,
        frequency=Frequency.BIENNIAL,
        rule="anniversary_month_end",
        entity_types=OPERATING_ENTITIES,
        states=("NY",),
        estimated_cost=9,
    ),
    ComplianceTemplate(
        event_type="franchise_tax",
        title="New York Corporation Franchise Tax (CT-3)",
        description="File the corporation franchise tax return with the New York Department of Taxation and Finance.",
        category=EventCategory.TAX,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="fixed",
        month=4,
        day=15,
        entity_types=CORPORATE_ENTITIES,
        states=("NY",),
        filing_link="https://www.tax.ny.gov/bus/ct/",
        reminder_days=(60, 30, 14, 7, 1),
    ),
    # Wyoming
    ComplianceTemplate(
        event_type="annual_report",
        title="Wyoming Annual Report",
        description="File the annual report and license tax with the Wyoming Secretary of State.",
        category=EventCategory.STATE_FILING,
        priority=Priority.HIGH,
        frequency=Frequency.ANNUAL,
        rule="anniversary_month_start",
        entity_types=OPERATING_ENTITIES,
        states=("WY",),
        estimated_cost=60,
        filing_link="https://wyobiz.wyo.gov/",
    ),
]


# =============================================================================
# Ongoing Maintenance
# =============================================================================

MAINTENANCE_TEMPLATES = [
    ComplianceTemplate(
        event_type="business_license_renewal",
        title="Business License Renewal",
        description="Renew your business license with local authorities.",
        category=EventCategory.LICENSING,
        priority=Priority.MEDIUM,
        frequency=Frequency.ANNUAL,
        rule="anniversary",
        reminder_days=(30, 14, 7),
    ),
    ComplianceTemplate(
        event_type="registered_agent_verification",
        title="Registered Agent Verification",
        description="Verify your registered agent information is current and accurate.",
        category=EventCategory.REGISTERED_AGENT,
        priority=Priority.MEDIUM,
        frequency=Frequency.ANNUAL,
        rule="anniversary",
        entity_types=OPERATING_ENTITIES,
        reminder_days=(30, 14, 7),
    ),
]


COMPLIANCE_TEMPLATES: list[ComplianceTemplate] = (
    FEDERAL_TEMPLATES + STATE_TEMPLATES + MAINTENANCE_TEMPLATES
)


def templates_for(entity_type: EntityType | str, state: str) -> list[ComplianceTemplate]:
    """
    Templates a business of the given type and state must follow.

    Unknown entity types match nothing.

    Example:
        [t.event_type for t in templates_for("LLC", "DE")]
        # ['tax_filing', 'quarterly_taxes', 'boir_filing', 'de_llc_annual_tax', ...]
    """
    return [t for t in COMPLIANCE_TEMPLATES if t.applies_to(entity_type, state)]
