"""Click commands for kitsync.

Each command resolves its KitsyncContext from click's context object and
delegates to kitsync.operations.
"""
