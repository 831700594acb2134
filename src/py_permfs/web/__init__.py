"""Web UI for the file system shell."""
