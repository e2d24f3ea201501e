"""
Infrastructure Layer

File persistence and LLM executors.
"""
