from __future__ import annotations

from fastapi import APIRouter

from venue_rules.api.routes import admin_templates, rules, simulation

api_router = APIRouter()

api_router.include_router(simulation.router, prefix="/simulation", tags=["simulation"])
api_router.include_router(rules.router, prefix="/rules", tags=["rules"])

# Admin
api_router.include_router(admin_templates.router, prefix="/admin/templates", tags=["admin-templates"])
