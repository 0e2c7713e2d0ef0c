"""Version 1 of the Resources API."""
