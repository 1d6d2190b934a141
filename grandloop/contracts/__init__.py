"""
Contracts Module

This module defines the value types exchanged between layers. All
inter-layer communication MUST use these contracts. No layer may import
implementation details from another layer.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses or enums)
2. All contracts include explicit error states
3. Every stored quantity is clamped into [0.0, 1.0]
4. All timestamps use UTC and are never mutated
"""
