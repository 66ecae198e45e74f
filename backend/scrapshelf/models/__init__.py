"""ORM Models: SQLAlchemy declarative models for users, sessions, scraps and feeds.

Invariants:
    - All models inherit from Base (db/base.py)
    - Ids are string UUIDs generated client-side

Design Decisions:
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from scrapshelf.models.user import User, AuthSession  # noqa: F401
from scrapshelf.models.category import Category  # noqa: F401
from scrapshelf.models.scrap_book import ScrapBook  # noqa: F401
from scrapshelf.models.feed import Feed, Article  # noqa: F401
