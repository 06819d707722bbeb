"""
Tests for core app.

This package contains test modules for:
- test_services.py: BaseService logging and transaction helpers
- test_views.py: health check and the DRF exception handler
"""
