"""Subcontractor compliance determination engine."""
