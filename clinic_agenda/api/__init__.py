"""
API module for the clinic agenda backend
"""
