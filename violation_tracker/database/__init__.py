from violation_tracker.database.db import get_db, commit_or_raise, SessionLocal, ENGINE

__all__ = ["get_db", "commit_or_raise", "SessionLocal", "ENGINE"]
