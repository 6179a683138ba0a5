"""
CER Grader: Automated transcription extra-credit grading

A CI-driven grading step that runs a student's transcription function
against a target image, measures the character error rate against a
ground-truth transcript and maps it to an extra-credit score.
"""

__version__ = "0.1.0"
