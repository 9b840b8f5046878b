# authcore/__init__.py
"""authcore - credential lifecycle core"""
__version__ = "1.0.0"
