"""
agrotelemetry/connectivity/relative_time.py
───────────────────────────────────────────
"Last seen" formatting for device heartbeats.

Buckets (floor-divided elapsed seconds):
  < 5 s   → "Just now"
  < 60 s  → "Ns ago"
  < 60 m  → "Nm ago"
  < 24 h  → "Nh ago"
  < 7 d   → "Nd ago"
  < 4 w   → "Nw ago"
  else    → "Nmo ago"   (30-day months)
"""
from __future__ import annotations

import math


def format_relative(then: float, now: float) -> str:
    """
    Format the time elapsed between two Unix timestamps (seconds).

    A heartbeat stamped in the future (device clock ahead of ours) reads
    as "Just now".
    """
    seconds = math.floor(now - then)
    if seconds < 5:
        return "Just now"
    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 7:
        return f"{days}d ago"
    weeks = days // 7
    if weeks < 4:
        return f"{weeks}w ago"
    # 28 and 29 days would floor to 0 months
    return f"{max(1, days // 30)}mo ago"
