"""FastAPI host for interactive study-note diagrams."""
