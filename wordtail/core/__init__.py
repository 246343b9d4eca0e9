"""Core gameplay primitives (word history and state transitions).

Kept free of FastAPI and Redis concerns so it can be reused by API routes and tests.
"""
