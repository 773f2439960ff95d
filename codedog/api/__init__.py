"""API package - FastAPI routes and the WebSocket surface."""
