"""InterestConnect backend: people matching, groups, events and messaging."""

__version__ = "1.0.0"
