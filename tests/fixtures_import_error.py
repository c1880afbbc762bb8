"""Module that fails at import time, used by dotted-path lookups."""

raise RuntimeError("engine registry unavailable")


class Thing:  # pragma: no cover
    pass
