"""
Widgets for the FTD Host TUI.
"""

from datetime import datetime

from textual.widgets import Static


class StatusPanel(Static):
    """
    Device status panel: connection, role, addresses and link statistics.
    """

    DEFAULT_CSS = """
    StatusPanel {
        border: solid yellow;
        height: auto;
        padding: 1;
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.connected = False
        self.device = "-"
        self.state = "UNKNOWN"
        self.network = "-"
        self.omr_address = "-"
        self.stats = {
            "commands_tx": 0,
            "lines_rx": 0,
            "prompt_lines": 0,
            "protocol_errors": 0,
        }

    def update_status(
        self,
        connected: bool = None,
        device: str = None,
        state: str = None,
        network: str = None,
        omr_address: str = None,
        stats: dict = None,
    ) -> None:
        """Update status display."""
        if connected is not None:
            self.connected = connected
        if device is not None:
            self.device = device
        if state is not None:
            self.state = state
        if network is not None:
            self.network = network
        if omr_address is not None:
            self.omr_address = omr_address
        if stats is not None:
            self.stats.update(stats)

        conn_str = "[green]CONNECTED[/green]" if self.connected else "[red]DISCONNECTED[/red]"
        attached = self.state in ("leader", "router", "child")
        state_str = f"[green]{self.state}[/green]" if attached else f"[yellow]{self.state}[/yellow]"

        content = f"""[bold]DEVICE STATUS[/bold]

Connection:  {conn_str}
Device:      {self.device}
State:       {state_str}
Network:     {self.network}
OMR address: {self.omr_address}

[bold]CLI STATISTICS[/bold]

Commands:    {self.stats['commands_tx']:>6}
Lines RX:    {self.stats['lines_rx']:>6}
Prompts:     {self.stats['prompt_lines']:>6}
Errors:      {self.stats['protocol_errors']:>6}"""

        self.update(content)
        self.refresh()

    def on_mount(self) -> None:
        """Initialize display."""
        self.update_status()


class CommandMonitor(Static):
    """
    Scrolling view of the last CLI lines sent and received.
    """

    DEFAULT_CSS = """
    CommandMonitor {
        height: 100%;
        padding: 0 1;
    }
    """

    def __init__(self, max_lines: int = 20, **kwargs):
        super().__init__(**kwargs)
        self.max_lines = max_lines
        self.lines = []

    def render(self) -> str:
        """Render the widget content."""
        title = f"[bold]CLI MONITOR[/bold] (Last {self.max_lines} Lines)\n"
        if not self.lines:
            return f"{title}\n[dim]No traffic yet...[/dim]"

        rendered = [title]
        for entry in reversed(self.lines):  # Newest first
            time_str = entry["time"].strftime("%H:%M:%S.%f")[:-3]
            indicator = "[cyan]→[/cyan]" if entry["dir"] == "TX" else "[green]←[/green]"
            text = entry["line"]
            if len(text) > 70:
                text = text[:67] + "..."
            rendered.append(f"{time_str} {indicator} {entry['dir']:2} {text}")

        return "\n".join(rendered)

    def add_line(self, event: tuple[str, str]) -> None:
        """Add a (direction, line) observer event."""
        direction, line = event
        self.lines.append({"time": datetime.now(), "dir": direction, "line": line})

        if len(self.lines) > self.max_lines:
            self.lines = self.lines[-self.max_lines:]

        self.refresh()

    def clear(self) -> None:
        """Clear all lines."""
        self.lines = []
        self.refresh()
