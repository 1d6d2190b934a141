"""
Shared test configuration.

Composite strategies that build entries and states are slow on their
first draws, so property tests run without a per-example deadline.
"""

from hypothesis import settings

settings.register_profile("grandloop", deadline=None)
settings.load_profile("grandloop")
