"""Service modules"""
from .dispatcher import SwapDispatcher
from .matcher import match_holdings, select_eligible
from .planner import plan_rotations, prioritize, should_rotate, summarize
from .rotator import Rotator

__all__ = [
    "Rotator",
    "SwapDispatcher",
    "match_holdings",
    "plan_rotations",
    "prioritize",
    "select_eligible",
    "should_rotate",
    "summarize",
]
