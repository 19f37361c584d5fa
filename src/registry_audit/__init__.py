"""Registry-backed security configuration auditing."""
