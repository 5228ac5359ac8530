"""memdiff: differential testing for the 4-cell memory protocol.

The package is split the way the harness runs:
- a local reference model that defines what every command should return
- a seedable command generator and a fixed-width wire codec
- a blocking TCP executor and a runner that compares both sides and halts

A run stops at the first disagreement; the seed and trace reproduce it.
"""

__all__ = []
