"""
An example API that demonstrates controller ordering and authorization documentation with `swagauth`.
"""

__version__ = "1.0.0"
