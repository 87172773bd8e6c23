"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager and display-name helpers

Usage:
    pytest authentication/tests/
"""
