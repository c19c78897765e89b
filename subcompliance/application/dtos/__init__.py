"""Application DTOs (results and commands passed between layers)."""
