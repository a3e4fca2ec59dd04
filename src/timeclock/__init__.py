"""Workforce time-clock engine.

Feature modules (punches, timeentries, adjustments, breaks, swaps, timeoff, reports) each keep a
model / repository protocol / MySQL repository / service / controller split, wired
together in ``container``.
"""
