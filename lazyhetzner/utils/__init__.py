"""Utility helpers for lazyhetzner."""
