"""
Faultline CLI.

The `faultline` command runs scripts under a configured error handler
and inspects error categories and configuration.

Usage:
    faultline categories
    faultline check-config --env-file .env
    faultline run app.py --log-uncaught ALL --exception ValueError
"""

__cli_name__ = "faultline"
