"""CLI commands for voltz-agent."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import typer
from eth_account import Account

from voltz_agent import __logo__, __version__
from voltz_agent.agent.loop import AgentLoop
from voltz_agent.backend.gateway import BackendGateway
from voltz_agent.bus.queue import MessageBus
from voltz_agent.channels.console import ConsoleChannel
from voltz_agent.channels.manager import ChannelManager
from voltz_agent.config.loader import load_config
from voltz_agent.config.schema import Config
from voltz_agent.health import HealthServer
from voltz_agent.logging import get_logger, setup_logging
from voltz_agent.middleware.ratelimit import RateLimitStore

app = typer.Typer(
    name="voltz-agent",
    help=f"{__logo__} voltz-agent - Voltz event networking chat agent",
    no_args_is_help=True,
)

logger = get_logger(__name__)

SEND_REPLY_TIMEOUT = 10.0  # seconds


def version_callback(value: bool):
    if value:
        typer.echo(f"{__logo__} voltz-agent v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """voltz-agent - Voltz event networking chat agent."""
    pass


def _load(config_path: Path | None) -> Config:
    config = load_config(config_path)
    setup_logging(json_output=config.logging.json_output, level=config.logging.level)
    return config


def _agent_address(config: Config) -> str:
    """Derive the agent's address from its wallet key; exits with status 1 if unusable."""
    key = config.agent.resolved_wallet_key
    if not key:
        typer.echo("❌ XMTP_WALLET_KEY not found in environment", err=True)
        raise typer.Exit(1)
    try:
        return Account.from_key(key).address
    except Exception:
        typer.echo("❌ XMTP_WALLET_KEY is not a valid private key", err=True)
        raise typer.Exit(1)


@dataclass
class _Runtime:
    bus: MessageBus
    gateway: BackendGateway
    agent: AgentLoop
    channels: ChannelManager
    console: ConsoleChannel


def _build_runtime(
    config: Config,
    agent_address: str,
    *,
    interactive: bool,
    write: Callable[[str], None] = print,
) -> _Runtime:
    bus = MessageBus()
    gateway = BackendGateway(
        base_url=config.backend.api_url,
        timeout=config.backend.timeout_seconds,
    )
    rl = config.rate_limit
    rate_limiter = (
        RateLimitStore(
            max_messages=rl.max_messages,
            window_seconds=rl.window_seconds,
            sweep_interval_seconds=rl.sweep_interval_seconds,
        )
        if rl.enabled else None
    )
    agent = AgentLoop(bus=bus, gateway=gateway, agent_address=agent_address, rate_limiter=rate_limiter)
    channels = ChannelManager(bus)
    console = ConsoleChannel(config.console, bus, write=write, announce_start=interactive)
    channels.register(console)
    return _Runtime(bus=bus, gateway=gateway, agent=agent, channels=channels, console=console)


@app.command()
def run(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
    sender: str = typer.Option(None, "--as", help="Sender address to chat as"),
):
    """Start the agent and chat with it from this terminal."""
    config = _load(config_path)
    agent_address = _agent_address(config)
    if sender:
        config.console.sender_address = sender

    async def _serve() -> None:
        rt = _build_runtime(config, agent_address, interactive=True)
        health: HealthServer | None = None
        if config.health.enabled:
            health = HealthServer(
                agent=rt.agent, bus=rt.bus, channels=rt.channels,
                host=config.health.host, port=config.health.port,
            )
            rt.agent.on_processed = health.record_processed
            await health.start()

        await rt.gateway.connect()
        agent_task = asyncio.create_task(rt.agent.run())
        logger.info("Voltz agent online", agent_address=agent_address, env=config.agent.env)
        typer.echo(f"{__logo__} Chatting with {agent_address} (type 'exit' to quit)")
        try:
            await rt.channels.start_all()
        finally:
            rt.agent.stop()
            await rt.agent.wait_stopped(timeout=5.0)
            agent_task.cancel()
            await asyncio.gather(agent_task, return_exceptions=True)
            await rt.channels.stop_all()
            if health is not None:
                await health.stop()
            await rt.gateway.aclose()

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        typer.echo("\n🛑 Shutting down...")


@app.command()
def send(
    message: str = typer.Argument(..., help="Message to send"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
    sender: str = typer.Option(None, "--as", help="Sender address to send as"),
    timeout: float = typer.Option(SEND_REPLY_TIMEOUT, "--timeout", help="Seconds to wait for a reply"),
):
    """Send a single message through the agent and print the reply."""
    config = _load(config_path)
    agent_address = _agent_address(config)
    if sender:
        config.console.sender_address = sender

    async def _send_once() -> str | None:
        rt = _build_runtime(config, agent_address, interactive=False, write=lambda _text: None)
        rt.channels.start_dispatcher()
        agent_task = asyncio.create_task(rt.agent.run())
        try:
            await rt.console.submit(message)
            return await rt.console.next_reply(timeout)
        finally:
            rt.agent.stop()
            agent_task.cancel()
            await asyncio.gather(agent_task, return_exceptions=True)
            await rt.channels.stop_all()
            await rt.gateway.aclose()

    reply = asyncio.run(_send_once())
    if reply is None:
        typer.echo("No response received (timeout)")
    else:
        typer.echo(f"📩 Response: {reply}")


@app.command()
def info(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Show information about the configured agent."""
    config = _load(config_path)
    agent_address = _agent_address(config)
    rl = config.rate_limit
    typer.echo("📋 Agent Information:")
    typer.echo(f"Address: {agent_address}")
    typer.echo(f"Environment: {config.agent.env}")
    typer.echo(f"Backend API: {config.backend.api_url}")
    typer.echo(f"Log Level: {config.logging.level}")
    if rl.enabled:
        typer.echo(f"Rate Limit: {rl.max_messages} messages / {rl.window_seconds:g}s")
    else:
        typer.echo("Rate Limit: disabled")


@app.command()
def ping(
    config_path: Path = typer.Option(None, "--config", "-c", help="Path to config.json"),
):
    """Check that the Voltz backend is reachable."""
    config = _load(config_path)

    async def _probe() -> bool:
        async with BackendGateway(
            base_url=config.backend.api_url,
            timeout=config.backend.timeout_seconds,
        ) as gateway:
            return await gateway.test_connection()

    if asyncio.run(_probe()):
        typer.echo(f"✅ Backend reachable at {config.backend.api_url}")
    else:
        typer.echo(f"⚠️  Could not connect to backend at {config.backend.api_url}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
