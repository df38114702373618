"""
Database layer for Domain Analyzer.

Usage:
    from domain_analyzer.database import AnalysisRepository, init_db

    init_db()
    repo = AnalysisRepository()
"""

from .models import Analysis, Base, FindingRow
from .repository import AnalysisRepository
from .session import (
    check_db_connection,
    create_db_engine,
    get_database_url,
    get_db_context,
    get_engine,
    get_session_factory,
    init_db,
    make_session_factory,
)

__all__ = [
    "Analysis",
    "Base",
    "FindingRow",
    "AnalysisRepository",
    "check_db_connection",
    "create_db_engine",
    "get_database_url",
    "get_db_context",
    "get_engine",
    "get_session_factory",
    "init_db",
    "make_session_factory",
]
