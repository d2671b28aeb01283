# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# HTTP layer of the Heat Awards backend:
# - main.py: App factory, CORS, exception handlers, router mounting
# - config.py: Settings loaded from the environment / .env
# - exceptions.py: Error types and their JSON responses
# - auth/: Supabase JWT verification and role dependencies
# - routers/: Endpoints grouped by audience (public, supplier, judge, admin)
#
# Routers stay thin and call into core/services.
# =============================================================================
