"""GitHub repository blog article pipeline"""

__version__ = "1.0.0"
