"""Worked examples of layered modules."""
