"""
hwinventory - Linux hardware inventory and normalization engine
"""

__version__ = "1.0.0"
