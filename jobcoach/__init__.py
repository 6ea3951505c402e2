"""
JobCoach: job-search assistant backend and mock-interview session core.
"""
__version__ = "0.1.0"
