"""Use cases for loading and applying notification preferences."""

from .gate import (
    Channel,
    ChannelDecision,
    bypasses_quiet_hours,
    evaluate_channel,
    is_within_quiet_hours,
)
from .load_preferences import load_preferences
from .update_preferences import merge_preferences, update_preferences

__all__ = [
    "Channel",
    "ChannelDecision",
    "bypasses_quiet_hours",
    "evaluate_channel",
    "is_within_quiet_hours",
    "load_preferences",
    "merge_preferences",
    "update_preferences",
]
