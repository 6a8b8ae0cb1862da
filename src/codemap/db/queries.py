"""Named SQL query constants used across commands."""

# File queries
FILE_BY_PATH = "SELECT * FROM files WHERE path = ?"
FILE_BY_SUFFIX = "SELECT * FROM files WHERE path LIKE ? ORDER BY path LIMIT 1"

# Symbol queries
SYMBOLS_IN_FILE = """
    SELECT s.*, f.path AS file_path
    FROM symbols s JOIN files f ON s.file_id = f.id
    WHERE s.file_id = ? ORDER BY s.byte_offset
"""
SYMBOL_BY_NAME = """
    SELECT s.*, f.path AS file_path
    FROM symbols s JOIN files f ON s.file_id = f.id
    WHERE s.name = ? OR s.qualified_name = ?
    ORDER BY f.path, s.byte_offset
"""

# Reference queries
CALLERS_OF = """
    SELECT r.*, f.path AS file_path
    FROM refs r JOIN files f ON r.file_id = f.id
    WHERE r.target_name = ? ORDER BY f.path, r.byte_offset
"""
