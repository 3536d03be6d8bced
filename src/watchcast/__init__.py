"""
watchcast - live camera broadcast server.
"""
__version__ = "0.1.0"
