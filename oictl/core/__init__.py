"""
Core configuration and error types for oictl.
"""
