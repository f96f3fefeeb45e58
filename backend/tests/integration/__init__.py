"""
Integration Tests

Integration tests require a running PostgreSQL test database configured
through the POSTGRES_TEST_* environment variables. The suite is skipped
when the database is unreachable.

These tests verify row locking, atomic counting and the full
submit/undo flow against real storage.
"""
