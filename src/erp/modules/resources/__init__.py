"""
Resources module - Files published to batches, programs or everyone.
"""
