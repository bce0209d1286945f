"""FastAPI service for the freight logistics platform.

This package provides the REST API behind the public site, the customer
portal and the admin back-office: accounts, quote requests, shipments,
tracking, reference catalogs and support messages, stored in MongoDB.
"""

__version__ = "0.1.0"
