"""
HTTP API layer - FastAPI app, routes, schemas and middleware
"""
