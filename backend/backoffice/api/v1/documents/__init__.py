"""Documents API package.

- routes: Create numbered documents (quotations, sales, purchase orders,
  stock transfers) and look them up by number
"""

from backoffice.api.v1.documents.routes import router

__all__ = ["router"]
