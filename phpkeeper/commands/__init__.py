"""CLI subcommands for phpkeeper."""
