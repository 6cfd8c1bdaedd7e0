"""
indoorscore - indoor coverage and navigability of OSM buildings.

Scores buildings mapped with Simple Indoor Tagging:
- how much of each footprint is covered by tagged rooms and corridors
- which rooms and levels are reachable from an entrance
- per-building scores, colors and global means across a set of buildings
"""

__version__ = "0.1.0"
