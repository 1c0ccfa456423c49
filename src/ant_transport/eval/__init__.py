"""Evaluation, reporting and command-line entry points."""
