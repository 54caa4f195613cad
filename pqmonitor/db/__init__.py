"""
Persistence layer: ORM models, async engine/session setup and the SQL-backed
sample and aggregate stores.

CHANGELOG:
- 2026-10-17: Initial creation
"""
