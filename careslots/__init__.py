"""
careslots - provider availability scheduling engine.
"""

__version__ = "0.3.0"
