"""
Application services wiring the core to the stores: ingestion, read queries,
daily aggregation, scheduled-job health tracking and the daily trigger loop.

CHANGELOG:
- 2026-10-17: Initial creation
"""
