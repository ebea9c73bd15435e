"""
aesthetic-progression: guided 12/8/8 gym workout tracker.
"""

__version__ = "0.1.0"
