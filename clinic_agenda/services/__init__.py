"""
Services for the clinic agenda backend.
"""
