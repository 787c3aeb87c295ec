class StoreError(Exception):
    """Any failure reported by the persistent document store."""


class PermissionDeniedError(StoreError):
    """The store refused the operation for the current credentials."""


class IndexUnavailableError(StoreError):
    """An ordered query needs an index the store does not have right now.

    Callers degrade to the unordered query plus a client-side sort.
    """
