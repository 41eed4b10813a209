"""Core collaborators: connections, execution, query building, errors."""
