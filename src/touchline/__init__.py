"""
Touchline - Football Statistics Reconciliation

Ingests football statistics from football-data.org, the Fantasy Premier
League API and understat.com, and reconciles them into one canonical
schema.

Main components:
- api: Clients for the three upstream sources
- players: Cross-source player identity resolution
- services: Idempotent ingestion of per-fixture and per-gameweek facts
- db: SQLAlchemy models and session management
"""

__version__ = "0.1.0"
