"""Exception types raised by the PDN core."""


class InvalidSelectionError(ValueError):
    """Source/target selection cannot be used for a query.

    Raised for missing selections, unknown ids, source and target in the
    same domain, or querying a session before a network was generated.
    """


class GridCapacityError(RuntimeError):
    """Grid has no free cell left for an element (strict placement only)."""
