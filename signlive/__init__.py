"""
Real-time sign recognition from hand landmarks.
"""
__version__ = "0.1.0"
