"""Chat-completion completer settings."""
