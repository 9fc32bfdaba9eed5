"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Internal data structures (status flags, stage projection)
- Schemas: API contract (what client sends/receives)
"""
