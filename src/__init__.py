"""
Render Service
==============

A stateless render service that captures a URL or raw markup as an image, a PDF,
or a zip bundle of several captures, driving a headless browser through Playwright.

This package provides:
- Render descriptor models and validation
- A reusable automation session shared across requests
- Page rendering and archive packaging
- A request orchestrator mapping inbound events to response envelopes
- FastAPI and API-gateway adapters
"""

__version__ = "1.0.0"
__author__ = "Render Service Team"
