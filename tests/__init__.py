"""
Test Suite
==========

Test suite matching the src/ directory structure.

Test Categories:
- unit: Unit tests for individual components with Playwright mocked out
- integration: Adapter tests and end-to-end renders against a real Chromium
"""
