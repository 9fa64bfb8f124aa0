# clientrsa Test Suite
"""
Test suite including:
- Unit tests for the arithmetic and padding engine
- Round-trip tests against independent RSA decryption
- Invalid input tests

Run with: pytest
Coverage: coverage run -m pytest && coverage report
"""
