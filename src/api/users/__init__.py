"""Users bounded context.

Manages the user resource: registration with password hashing, lookup,
profile updates and deletion.
"""
