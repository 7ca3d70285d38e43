"""Command-line interface for cartsync."""
