"""Candidate/job matching engine for the job board."""

__version__ = "0.1.0"
