"""API router for v1 endpoints."""

from fastapi import APIRouter

from app.api import archetypes, enrichment, hypotheses, workspace

router = APIRouter()

# AI enrichment (editors only, no writes)
router.include_router(enrichment.router, tags=["enrichment"])

# Relationship queries, alignment warnings and dashboard metrics
router.include_router(workspace.router, tags=["workspace"])

# Hypothesis lifecycle with auto-generated decisions
router.include_router(hypotheses.router, tags=["hypotheses"])

# Archetype writes with derived score recomputation
router.include_router(archetypes.router, tags=["archetypes"])
