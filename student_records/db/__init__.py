from student_records.db.session import Database, database, get_db

__all__ = ["Database", "database", "get_db"]
