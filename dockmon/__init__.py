"""
Dockmon - Live Docker Container Log Monitor

This package streams the logs of a running container to a browser or terminal
over an authenticated WebSocket, with container listing filtered by name and
state allow-lists.
"""

__version__ = "0.1.0"
__author__ = "Dockmon Team"
