"""
Tabula - Declarative Card Game Rule Engine

A rules-as-data engine for turn-based card games. A game is described
entirely by a config document and the engine provides:
- State management
- Permission resolution over player roles
- Effect graph execution over registered functions
- End-of-game evaluation and ranking
"""

__version__ = "0.1.0"
