"""
Core Render Engine
==================

Session management, page rendering, archive packaging and request orchestration.

Components:
- session: reusable headless browser session
- rendering: page renderer and archive builder
- orchestrator: inbound event to response envelope
- exceptions: error taxonomy
"""
