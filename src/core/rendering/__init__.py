"""
Rendering Module
===============

Artifact creation with browser automation.

Components:
- page_renderer: one descriptor to one image or PDF
- archive_builder: ordered zip bundles of several renders
"""
