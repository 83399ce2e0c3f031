"""Core normalization pipeline for wktview."""
