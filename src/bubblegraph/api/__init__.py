"""REST routers mounted by the server."""
