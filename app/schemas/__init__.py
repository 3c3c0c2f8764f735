"""
Schemas module - Request/Response schemas for API endpoints.

Difference from models:
- Models: Internal domain records (dataclasses)
- Schemas: API contract (what client sends/receives)
"""
