"""
Integration Tests Package

Test harness for the engine and the layers it owns.

TEST AXIOMS:
=============
1. Bounded: every published level stays in [0, 1]
2. Single writer: concurrent operations never lose an update
3. Explicit failure: rejected operations leave state untouched
"""
