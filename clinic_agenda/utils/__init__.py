"""
Utility modules for the clinic agenda backend.
"""
