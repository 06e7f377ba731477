"""
Mesh input and network output.
"""

from .off_reader import read_off
from .export import network_to_geojson, write_geojson

__all__ = ['read_off', 'network_to_geojson', 'write_geojson']
