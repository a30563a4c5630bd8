"""
security/ - Access Control
==========================
Decorators that guard bot handlers.
"""
