"""
API Routes
==========

- render: GET/POST /render
- health: GET /health
"""
