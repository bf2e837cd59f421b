"""Command-line front end for the example harness."""
