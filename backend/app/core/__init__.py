# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- db: Database configuration and connection management
- errors: Error taxonomy and request timeout guard
- security: Password hashing and JWT tokens
"""
