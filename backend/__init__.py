"""DB2ERD backend API."""
