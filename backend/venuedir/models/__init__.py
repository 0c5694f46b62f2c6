"""ORM models. Importing this package registers every table with `Base.metadata`."""

from venuedir.models.user import User
from venuedir.models.venue import Venue

__all__ = ["User", "Venue"]
