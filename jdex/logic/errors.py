"""
jdex/logic/errors.py
Exceptions raised by the journal, its durable store and the index database.
"""


class JournalError(Exception):
    """An undo or redo could not be carried out."""


class MissingDependencyError(JournalError):
    """The inverse operation needs a record that no longer exists."""


class UnknownActionError(JournalError):
    pass


class QuotaExceededError(Exception):
    """The key-value store has no room for the value being written."""


class IndexStoreError(Exception):
    """The index database rejected a mutation."""
