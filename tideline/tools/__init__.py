"""Command-line tools (run with `python -m tideline.tools.<name>`)."""
