"""Security tests for DocVault

This module contains security-focused tests including:
- Cross-company document access attempts
- Token forgery
- Filename path traversal and header injection
"""
