"""Page routers for the web client."""
