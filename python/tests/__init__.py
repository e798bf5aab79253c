"""
Test suite for stock.

Test Categories:
- Unit tests: matcher, content loader, mirror store, settings, prompts
- Integration tests: sync controller against a real temp mirror, and the
  stock command flows with the HTTP layer mocked
"""
