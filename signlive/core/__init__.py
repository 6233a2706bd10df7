"""
Core configuration, geometry helpers and error types.
"""
from signlive.core import config
from signlive.core.exceptions import SignLiveError, InitializationError
from signlive.core.geometry import Point3D, distance, bearing

__all__ = [
    'config',
    'SignLiveError',
    'InitializationError',
    'Point3D',
    'distance',
    'bearing',
]
