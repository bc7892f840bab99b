"""
Concept-overlap similarity scoring.

Feature lists are matched against a corpus of stored concepts, and two
lists are compared by how their match patterns overlap.
"""

__version__ = "0.1.0"
