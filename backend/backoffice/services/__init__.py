"""Services module.

This module provides the service layer architecture:
- exceptions: Custom service exceptions
- numbering: Document number allocation (candidates, oracle, insert retry)
- documents: Quotation, sale, purchase order and stock transfer services
"""
