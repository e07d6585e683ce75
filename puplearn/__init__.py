"""
PupLearn: flashcard study sets with adaptive Learn Mode.
"""

__version__ = "1.0.0"
