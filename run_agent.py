#!/usr/bin/env python3
"""
Wrapper script to run the spoke registration agent with Kopf.

Importing ``spoke.app`` registers the startup, cleanup and probe handlers,
then Kopf's CLI is launched with all standard arguments.

Usage:
    python run_agent.py [any kopf run arguments]

Examples:
    python run_agent.py --standalone --liveness=http://0.0.0.0:8080/healthz
    python run_agent.py --verbose --log-format=json
"""
import sys

if __name__ == '__main__':
    import kopf.cli

    # Import the agent module (which registers handlers via decorators)
    import spoke.app  # noqa: F401

    # Behave as if the user called: kopf run <args>
    sys.argv.insert(1, 'run')

    sys.exit(kopf.cli.main(prog_name="kopf"))
