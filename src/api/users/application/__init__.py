"""Users application layer.

Use cases for the user resource: validation, password hashing and
orchestration of the repository inside transactions.
"""
