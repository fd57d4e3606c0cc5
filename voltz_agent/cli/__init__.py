"""CLI module for voltz-agent."""
