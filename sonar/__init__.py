"""
Sonar - finds and ranks developer profiles that match a recruiter's brief.
"""
__version__ = "1.0.0"
