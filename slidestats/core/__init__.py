"""Core primitives: sliding windows, the statistic library and vocabulary,
dependency resolution, stream routing and batch processing.
"""
