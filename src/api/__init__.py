"""
HTTP Adapters
=============

Adapters between transports and the request orchestrator.

Modules:
- main: FastAPI application and local development server
- gateway: API-gateway style invocation handler
"""
