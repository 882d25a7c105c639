"""taskpad: a personal task tracker with a console front end."""

__version__ = "0.1.0"
