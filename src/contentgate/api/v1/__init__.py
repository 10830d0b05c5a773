"""Version 1 of the gateway API."""
