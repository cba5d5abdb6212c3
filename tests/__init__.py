"""pushwire Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - crypto/: Primitives (encoding, key agreement, HKDF chain, record encryption, framing)
  - push/: Message pipeline, VAPID tokens, gateway dispatch, full sends
  - core/: Models, configuration, logging and CLI

Running tests:
    # All tests
    uv run pytest

    # Specific module
    uv run pytest tests/unit/crypto/

    # With coverage
    uv run pytest --cov=pushwire --cov-report=term-missing
"""
