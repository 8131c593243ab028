"""Nexus Core Engine

Pure domain logic: no database, no network. Subpackages are imported
directly (src.core.player, src.core.quest, src.core.world, src.core.chronicle).
"""
__version__ = "0.1.0"
