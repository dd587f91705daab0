"""Store-level exceptions for the users context.

These exceptions represent errors that can occur during repository
operations. They are caught by the application layer and turned into
tagged results.
"""


class DuplicateEmailError(Exception):
    """Raised when a user would share an email with another user.

    The unique index on the email column is the final arbiter: two
    concurrent creates with the same email both pass the lookup check, and
    only one survives the insert.
    """

    pass
