"""
Entry point for running voltz-agent as a module: python -m voltz_agent
"""

from voltz_agent.cli.commands import app

if __name__ == "__main__":
    app()
