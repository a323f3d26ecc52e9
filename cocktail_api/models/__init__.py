"""
ORM models. Importing this package registers every table with Base.metadata
(used by Alembic autogenerate and by the test suite's create_all).
"""

from cocktail_api.models.user import User
from cocktail_api.models.spirit import Spirit
from cocktail_api.models.cocktail import Cocktail
from cocktail_api.models.comment import Comment

__all__ = ["User", "Spirit", "Cocktail", "Comment"]
