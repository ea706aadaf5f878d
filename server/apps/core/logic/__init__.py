"""Business logic layer for core app."""
