"""API routers, one per resource, mounted under the API prefix."""
