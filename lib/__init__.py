# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - mailer.py: SendGrid email delivery
# - sms.py: Telnyx SMS delivery
# - utils.py: Shared utilities (error handling, ID normalization, dates)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import ApplicationError, mask_email, normalize_id, parse_date, parse_datetime

__all__ = [
    "ApplicationError",
    "mask_email",
    "normalize_id",
    "parse_date",
    "parse_datetime",
]
