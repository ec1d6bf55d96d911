"""
Analysis Package.

Reporting helpers for the experiment runner: summary tables, kNN per-class
score tables, CSV export and elbow plots.
"""
