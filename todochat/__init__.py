"""
todochat: todo list API with a natural-language chat front-end.
"""

__version__ = "1.0.0"
