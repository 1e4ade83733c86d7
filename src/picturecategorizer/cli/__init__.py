"""Command-line interface for Picture Categorizer."""
