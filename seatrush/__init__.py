"""seatrush: golden-seat contention load harness."""

__version__ = "1.0.0"
