"""
repositories/ - Data Access Layer
==================================
The subscription store owns the canonical in-memory record list and
delegates persistence to a storage collaborator (PostgreSQL key-value).
"""
