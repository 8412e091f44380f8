"""Roll pacman packages back to archived builds."""

__version__ = "0.1.0"
