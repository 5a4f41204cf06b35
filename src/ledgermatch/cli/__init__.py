"""Command-line interface for ledgermatch."""
