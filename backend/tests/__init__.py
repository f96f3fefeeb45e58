"""
Revision Hub Test Suite

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures and test environment
    ├── unit/                # Isolated tests, database mocked
    └── integration/         # Tests against a PostgreSQL test database

Running Tests:
    # Run all tests
    pytest backend/tests -v

    # Run only unit tests (fast, no dependencies)
    pytest backend/tests/unit -v

    # Run only integration tests (requires PostgreSQL)
    pytest backend/tests/integration -v -m integration
"""
