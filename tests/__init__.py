# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Heat Awards API:
# - fake_supabase.py: In-memory Supabase client used by every service test
# - test_pricing.py, test_sauce_codes.py, test_packing_rules.py,
#   test_scoring.py: Pure rule modules
# - test_*_service.py: Services against the in-memory database
# - test_api.py: Endpoints through FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
