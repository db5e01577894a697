"""
Floris services.

Business rules for the gacha, the garden inventory, points and gift links.
"""
