# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable clients for external services:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - stripe_gateway.py: Hosted checkout sessions and webhook verification
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError, is_unique_violation
from lib.stripe_gateway import StripeGateway

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    "is_unique_violation",
    # Payments
    "StripeGateway",
]
