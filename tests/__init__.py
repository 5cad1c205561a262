# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the ParaFort Compliance API:
# - test_deadlines.py / test_templates.py: Due date rules and the catalog
# - test_reminders_policy.py / test_emails.py: Reminder policy and emails
# - test_*_service.py: Services with a patched SupabaseClient
# - test_api.py: Endpoints through FastAPI's TestClient
# - test_workers.py: Beat schedule and Celery task wrappers
#
# Run tests with: pytest
# =============================================================================
