"""Infrastructure layer for core app.

Connections to external systems shared by the other apps.
"""
