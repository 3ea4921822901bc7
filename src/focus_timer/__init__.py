"""focus-timer: a focus/break interval runner that takes the network away while you work."""

__version__ = "0.3.0"
