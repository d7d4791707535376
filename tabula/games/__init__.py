"""
Games module - Bundled example games.

Each game has its own subpackage with:
- Config document (containers, permissions, effect graphs)
- Function handlers the document references
- Helpers for building a ready-to-start controller
"""
