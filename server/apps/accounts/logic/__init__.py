"""Business logic layer for accounts app.

Registration and token based sessions: login, logout and resolving
a token to its user.
"""
