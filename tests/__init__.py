# Tests Package
"""
Test suite for the alert review report.

- unit/: Component-level tests
- integration/: Report pass flow tests
"""
