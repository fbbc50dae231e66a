"""Difficulty checks built on the shared movement primitives."""

from catch_verifier.checks.dashes import check_consecutive_dash, check_dash_cup, check_edge_walk
from catch_verifier.checks.hyperdashes import (
    check_antiflow_hyperdash,
    check_consecutive_hyperdash,
    check_different_snap_hyperdash,
    check_hyperdash_conjunction,
    check_hyperdash_salad,
    check_strong_hyperdash,
)
from catch_verifier.checks.issues import Issue, IssueLevel, format_timestamp
from catch_verifier.checks.runner import ALL_CHECKS, Check, get_checks, run_check, run_checks

__all__ = [
    # Dashes
    "check_consecutive_dash",
    "check_dash_cup",
    "check_edge_walk",
    # Hyperdashes
    "check_antiflow_hyperdash",
    "check_consecutive_hyperdash",
    "check_different_snap_hyperdash",
    "check_hyperdash_conjunction",
    "check_hyperdash_salad",
    "check_strong_hyperdash",
    # Issues
    "Issue",
    "IssueLevel",
    "format_timestamp",
    # Runner
    "ALL_CHECKS",
    "Check",
    "get_checks",
    "run_check",
    "run_checks",
]
