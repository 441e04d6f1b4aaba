"""
Newsletter API modules.
"""
