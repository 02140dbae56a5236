"""
Data Models
===========

Pydantic data models for request/response validation and internal data structures.

Models:
- schemas: render descriptors, artifacts, inbound events and response envelopes
"""
