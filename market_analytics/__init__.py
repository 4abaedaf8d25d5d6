"""Market Analytics Core: volume profiles, zone detection, enhanced metrics and reward scoring."""

__version__ = "1.0.0"
