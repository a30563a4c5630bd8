"""
models/ - Domain Layer
======================
Plain dataclasses and enums describing subscriptions.
No I/O and no dependencies on other layers.
"""
