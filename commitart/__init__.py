"""
commitart package

Draws text or hand-made pixel art onto a contribution calendar by compiling it
into a dated commit schedule and submitting that schedule to a generation
service.

Key responsibilities are split across modules:
- `glyphs.py`: the 5x7 bitmap font
- `grid.py`: text -> pixel grid, plus free-hand grid helpers
- `schedule.py`: pixel grid + anchor date -> dated commit schedule
- `errors.py`: failure taxonomy and classification of remote failures
- `executor.py`: timeout, retry with backoff, and cancellation for outbound calls
- `client.py`: isolated HTTP interaction with the generation service
- `session.py`: input validation and one-generation-at-a-time submission
- `cli.py`: CLI entrypoint (preview / generate / status)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
