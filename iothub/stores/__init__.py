"""
SQLite-backed persistence.

Every store function takes an open connection and runs one parameterized
statement. Connections come from Database.connect(), which opens them in
autocommit mode so each statement is atomic on its own.
"""
