"""
IO module for interview session interfaces.

Provides the terminal interface and offline event replay.
"""

from talent_match.io.replay import load_events, replay_events
from talent_match.io.text_interface import TextInterface, format_result

__all__ = ["TextInterface", "format_result", "load_events", "replay_events"]
