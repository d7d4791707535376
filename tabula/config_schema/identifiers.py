"""
Identifiers - Branded string types for each identifier namespace.

Every identifier in a game document is a plain string, but values from
different namespaces must never be swapped for one another. Each namespace
gets its own NewType so type checkers treat them as distinct while the
runtime representation stays a bare str.
"""

from typing import NewType

FunctionId = NewType("FunctionId", str)
EffectId = NewType("EffectId", str)
CardTypeId = NewType("CardTypeId", str)
ContainerId = NewType("ContainerId", str)
PlayerId = NewType("PlayerId", str)
Role = NewType("Role", str)
