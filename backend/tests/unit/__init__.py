"""
Unit Tests

Unit tests run in isolation without external dependencies.
The database session is mocked; API tests replace services through
FastAPI dependency overrides.
"""
