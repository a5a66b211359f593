"""
CLI subcommands.
"""
