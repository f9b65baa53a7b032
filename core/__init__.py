"""Guarded sequential pipeline.

Preconditions are evaluated and reported in full, one of several alternative
mechanisms is selected once, then ordered fallible steps run fail-fast with
per-step diagnostics and an optional capability-gated sub-sequence.
"""
