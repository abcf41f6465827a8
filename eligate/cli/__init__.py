# CLI package for ELI Gate
"""
Reporting CLI for running both validation gates locally.

Commands:
    eligate validate — Validate a JSON claim payload
    eligate codes    — Show the issue taxonomy
"""
