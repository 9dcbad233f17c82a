# ============================================================================
# API MODULE
# ============================================================================
# EPOCH: 1 - PROBES & METRICS
# STATUS: Core - FastAPI routes
# PURPOSE: Service index, runtime info and status endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Module

Informational routes and the response schemas shared by every router.

Usage:
    from api.routes import create_api_router
    from api.schemas import StressResponse
"""
