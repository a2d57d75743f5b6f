"""Command line interface for ctengine."""
