"""
Terminal UI (TUI) for FTD Host.

Launch with: python -m ftd_host.tui.tui (or the ftd-tui command).
"""

__all__ = ["main"]


def main():
    """Launch main TUI (requires textual)."""
    from ftd_host.tui.tui import main as _main
    _main()
