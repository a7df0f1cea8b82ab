"""Entity Data Model value types."""

from exactrest.domains.edm.date_time import DateTime

__all__ = ["DateTime"]
