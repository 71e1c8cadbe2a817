"""
Competency Catalog Module

Lifecycle and query engine for the curriculum competency taxonomy.

Endpoints:
- POST /competencies - Create competency (DRAFT)
- GET /competencies - List with filters, search, sort and pagination
- GET /competencies/subjects - Active subjects with counts
- GET /competencies/stats - Catalog statistics (catalog owner)
- GET /competencies/{id} - Get competency
- PATCH /competencies/{id} - Assign reviewer (DRAFT only)
- PATCH /competencies/{id}/activate - Activate reviewed DRAFT
- PATCH /competencies/{id}/deprecate - Deprecate, optionally naming a replacement
- GET /competencies/{id}/history - Audit trail (catalog owner)
"""

from api.competency.router import catalog_router

__all__ = ["catalog_router"]
