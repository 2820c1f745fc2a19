"""
Repository layer for data access.

Repositories encapsulate SQLAlchemy queries for each aggregate: inventory
items and the usage log, the sector/machine hierarchy with assignments, and
users with their roles.
"""
