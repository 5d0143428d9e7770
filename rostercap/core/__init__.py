"""Core domain: models, transfer engine and auto-draft."""
