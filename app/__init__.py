"""
Remote Internship Platform
Employers post internships, students apply, and interns work through tasks.

Architecture:
- app.core: config, identity, authorization guard, errors
- app.services: application / task / internship lifecycles and dashboards
- app.db: persistence interface (PostgreSQL via SQLAlchemy, or in-memory)
"""

__version__ = "1.0.0"
