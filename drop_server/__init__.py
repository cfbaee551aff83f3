"""Anonymous file-drop HTTP service."""
