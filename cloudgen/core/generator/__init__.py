"""
Multi-target generation — selection, partitioning, per-target state,
template routing and plugin aggregation.
"""
