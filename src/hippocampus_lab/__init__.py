"""
hippocampus-lab

Benchmark harness for conversation-memory techniques: selects conversation
history per technique, scores recall answers, and aggregates per-technique
metrics with 95% confidence intervals.
"""

__version__ = "0.1.0"
