"""CLI commands for agentry."""

import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from agentry.config import load_config, save_default_config
from agentry.config.loader import DEFAULT_CONFIG_FILE
from agentry.errors import AgentryError

app = typer.Typer(
    name="agentry",
    help="agentry: configurable LLM agents with tool calling",
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """agentry CLI entrypoint."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.command()
def onboard(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a default configuration file."""
    existed = (config_path or DEFAULT_CONFIG_FILE).exists()
    path = save_default_config(config_path, overwrite=force)

    if existed and not force:
        console.print(f"[yellow]Config already exists at:[/yellow] {path} (use --force to overwrite)")
    else:
        console.print(f"[green]Config created at:[/green] {path}")
    console.print("\n[yellow]Next steps:[/yellow]")
    console.print("1. Export ANTHROPIC_API_KEY, GEMINI_API_KEY or OPENAI_API_KEY")
    console.print("2. Run: agentry chat --agent dispatch_agent -m \"Hello!\"")


@app.command()
def models(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
) -> None:
    """List model keys from the built-in catalog and the config."""
    from agentry.providers.catalog import DEFAULT_MODEL_CONFIGS, provider_of

    config = load_config(config_path)

    table = Table(title="Models")
    table.add_column("Key", style="cyan")
    table.add_column("Provider", style="green")
    table.add_column("Model")
    table.add_column("Source", style="dim")

    for key, model_config in config.models.items():
        provider = model_config.get("provider") or provider_of(key)
        table.add_row(key, str(provider), str(model_config.get("model_name", "")), "config")
    for key, model_config in DEFAULT_MODEL_CONFIGS.items():
        if key not in config.models:
            table.add_row(key, provider_of(key), model_config["model_name"], "built-in")

    console.print(table)


@app.command()
def agents(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    project: Path = typer.Option(Path("."), "--project", "-p", help="Project directory"),
) -> None:
    """List configured agents."""
    from agentry.control.agent_builder import configured_agents

    config = load_config(config_path, project_dir=project)

    table = Table(title="Agents")
    table.add_column("Id", style="cyan")
    table.add_column("Tool name", style="green")
    table.add_column("Model")
    table.add_column("Tools")
    table.add_column("Memory")

    for spec in configured_agents(config):
        if spec.enable_tools is None:
            tools = "none"
        elif isinstance(spec.enable_tools, str):
            tools = spec.enable_tools
        else:
            tools = ", ".join(spec.enable_tools)
        table.add_row(
            spec.id,
            spec.tool_name,
            spec.model or "[dim]auto[/dim]",
            tools,
            str(spec.memory_size) if spec.memory_size else "stateless",
        )

    console.print(table)


@app.command()
def chat(
    agent: str = typer.Option("dispatch_agent", "--agent", "-a", help="Agent id or tool name"),
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Message to send"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    project: Path = typer.Option(Path("."), "--project", "-p", help="Project directory"),
) -> None:
    """Chat with a configured agent."""
    from agentry.control.runtime import AgentRuntime

    config = load_config(config_path, project_dir=project)
    try:
        runtime = AgentRuntime.from_config(config)
        spec = runtime.get_agent_spec(agent)
    except AgentryError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    def send(text: str) -> bool:
        try:
            result = runtime.chat(spec, text)
        except AgentryError as e:
            console.print(f"[red]Error:[/red] {e}")
            return False
        if result.thinking:
            console.print(result.thinking, style="dim", markup=False)
        if result.error:
            console.print(f"[red]{result.result}[/red]")
        else:
            console.print(result.result)
        return not result.error

    if message:
        if not send(message):
            raise typer.Exit(1)
        return

    console.print(f"[bold]agentry[/bold] chatting with {spec.tool_name}. Type 'exit' to quit.\n")
    while True:
        try:
            user_input = console.input("[bold blue]> [/bold blue]")
            if user_input.strip().lower() in ("exit", "quit"):
                break
            if not user_input.strip():
                continue
            send(user_input)
            console.print()
        except (KeyboardInterrupt, EOFError):
            break
    console.print("\n[dim]Goodbye![/dim]")
