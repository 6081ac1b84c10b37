"""Weather Hub.

Weather lookups for registered users, with favorite cities and a short
history of recent searches.
"""

__version__ = "0.1.0"
