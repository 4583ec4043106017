"""termsession -- Embeddable interactive terminal session engine.

This package implements the command-session core of a terminal-like
widget: command parsing and dispatch, the interactive sub-mode state
machine, command search and autocomplete scoring, history navigation,
log-buffer growth management and cursor layout over variable-width
characters. Painting the result is left to the host application.
"""

__version__ = "0.1.0"
