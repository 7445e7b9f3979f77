"""
Report rendering with rich.

Two phases: result lines are printed live while the engine collects (via
the engine's check callback), then render_summary() prints the scored
report. All host-derived text is escaped before it reaches rich markup.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.diagnostics.ledger import RunLedger
from ..core.diagnostics.models import CheckResult, CheckStatus, DiagnosticReport, HealthStatus
from ..core.diagnostics.scoring import is_priority_fix, prioritized_fixes
from ..utils.console import get_console, symbols_for
from ..utils.remediation import EMERGENCY_COMMANDS, MAINTENANCE_CHECKLIST

NAME_WIDTH = 40
DETAIL_LINES = 3

STATUS_STYLES = {
    CheckStatus.PASS: "pass",
    CheckStatus.FAIL: "fail",
    CheckStatus.WARN: "warn",
    CheckStatus.SKIP: "skip",
}

HEALTH_STYLES = {
    HealthStatus.CRITICAL: "critical",
    HealthStatus.EXCELLENT: "pass",
    HealthStatus.GOOD: "warn",
    HealthStatus.FAIR: "warn",
    HealthStatus.POOR: "fail",
    HealthStatus.UNKNOWN: "dim",
}


class ReportRenderer:
    """Renders live result lines and the final summary to a Console."""

    def __init__(self, console: Optional[Console] = None, ascii_only: bool = False,
                 max_fixes: int = 8, max_high: int = 5):
        self.console = console or get_console()
        self.ascii_only = ascii_only
        self.symbols = symbols_for(self.console, ascii_only)
        self.box = box.ASCII if ascii_only else box.ROUNDED
        self.max_fixes = max_fixes
        self.max_high = max_high

    # === Live output ===

    def render_header(self, system_info: dict, is_root: bool):
        self.console.print()
        self.console.print(Panel(
            Text("COMPREHENSIVE SYSTEM HEALTH CHECK", justify="center", style="bold"),
            border_style="banner", box=self.box,
        ))
        self.console.print("[bold]System Information:[/bold]")
        self.console.print(f"  Host: {escape(str(system_info.get('hostname', 'unknown')))}")
        self.console.print(f"  OS: {escape(str(system_info.get('os', 'Unknown Linux')))}")
        self.console.print(f"  Kernel: {escape(str(system_info.get('kernel', 'unknown')))}")
        self.console.print(
            f"  User: {escape(str(system_info.get('user', 'unknown')))} | "
            f"Scan Time: {escape(str(system_info.get('timestamp', '')))}"
        )
        self.console.print()
        if is_root:
            self.console.print(f"[pass]{self.symbols['pass']} Running with administrative privileges.[/pass]")
        else:
            self.console.print(
                f"[warn]{escape(self.symbols['warn'])} Running in user mode. "
                f"Some checks require sudo for full analysis.[/warn]"
            )

    def render_section(self, title: str, description: str = ""):
        self.console.print()
        self.console.rule(f"[heading]{escape(title.upper())}[/heading]", style="heading")
        if description:
            self.console.print(f"[dim]{escape(description)}[/dim]")
        self.console.print()

    def format_result_line(self, result: CheckResult) -> str:
        """Plain-text result line (no markup)."""
        symbol = self.symbols[result.status.value]
        return f"{symbol} {result.name:<{NAME_WIDTH}} {result.message}"

    def render_result(self, result: CheckResult, ledger: Optional[RunLedger] = None):
        """Print one result line with its note, error excerpt and fix."""
        symbol = self.symbols[result.status.value]
        line = Text(f"  {self.format_result_line(result)}")
        line.stylize(STATUS_STYLES[result.status], 2, 2 + len(symbol))
        self.console.print(line)

        if result.note:
            self.console.print(Text(f"    {result.note}", style="dim"))

        if result.detail and result.status == CheckStatus.FAIL:
            for detail_line in result.detail.splitlines()[:DETAIL_LINES]:
                self.console.print(Text(f"      -> {detail_line}", style="dim"))

        if ledger is not None and result.fix_key:
            fix = ledger.fix_suggestions.get(result.fix_key)
            if fix:
                self._print_block(f"{self.symbols['fix']} Fix: ", fix, style="fix", indent=4)

    def _print_block(self, prefix: str, text: str, style: str, indent: int):
        pad = " " * indent
        lines = text.splitlines() or [""]
        self.console.print(Text(f"{pad}{prefix}{lines[0]}", style=style))
        for extra in lines[1:]:
            self.console.print(Text(f"{pad}  {extra}", style=style))

    # === Summary ===

    def render_summary(self, report: DiagnosticReport):
        ledger = report.ledger
        health = report.score
        style = HEALTH_STYLES[health.status]

        self.render_section("Comprehensive System Health Report",
                            "Detailed analysis with prioritized recommendations")

        assessment = Text(justify="center")
        assessment.append("Overall Status: ", style="bold")
        assessment.append(health.status.value, style=style)
        assessment.append("\nHealth Score: ", style="bold")
        assessment.append(f"{health.percentage}%", style=style)
        self.console.print(Panel(assessment, title="SYSTEM HEALTH ASSESSMENT",
                                 border_style="banner", box=self.box))

        self._render_counts(ledger, report.duration_seconds)
        self._render_issues(ledger)
        self._render_fixes(ledger)
        self._render_inventory(report.hardware_inventory)
        self._render_recommendations(report.hardware_recommendations)
        self._render_checklists()

        self.console.print()
        self.console.print(
            f"[banner]Diagnostic Complete - {report.generated_at.strftime('%Y-%m-%d %H:%M:%S')}[/banner]"
        )
        self.console.print(f"[dim]System scan completed in {int(report.duration_seconds)} seconds[/dim]")
        self.console.print("[dim]For additional help, consult: /var/log/syslog or journalctl -xe[/dim]")
        self.console.print()

    def _render_counts(self, ledger: RunLedger, duration: float):
        table = Table(title="Test Execution Summary", show_header=False, box=self.box)
        table.add_column("Result", style="bold")
        table.add_column("Count", justify="right")
        table.add_row(Text(f"{self.symbols['pass']} Passed", style="pass"), str(ledger.passed))
        table.add_row(Text(f"{self.symbols['warn']} Warnings", style="warn"), str(ledger.warned))
        table.add_row(Text(f"{self.symbols['fail']} Failed", style="fail"), str(ledger.failed))
        table.add_row(Text(f"{self.symbols['skip']} Skipped", style="skip"), str(ledger.skipped))
        table.add_row("Total", f"{ledger.total} in {int(duration)}s")
        self.console.print(table)

    def _render_issues(self, ledger: RunLedger):
        if ledger.critical_issues:
            self.console.print()
            self.console.print("[critical]CRITICAL ISSUES (Immediate Attention Required):[/critical]")
            for i, issue in enumerate(ledger.critical_issues, 1):
                self.console.print(Text(f"  {i:2d}. {issue}", style="fail"))

        if ledger.high_issues:
            self.console.print()
            self.console.print("[high]HIGH PRIORITY ISSUES:[/high]")
            for i, issue in enumerate(ledger.high_issues[:self.max_high], 1):
                self.console.print(Text(f"  {i:2d}. {issue}", style="warn"))
            hidden = len(ledger.high_issues) - self.max_high
            if hidden > 0:
                self.console.print(f"  [dim]... and {hidden} more high priority issues[/dim]")

    def _render_fixes(self, ledger: RunLedger):
        fixes = prioritized_fixes(ledger.fix_suggestions, self.max_fixes)
        if not fixes:
            return

        self.console.print()
        self.console.print(f"[fix]{self.symbols['fix']} RECOMMENDED ACTIONS:[/fix]")
        for i, (key, text) in enumerate(fixes, 1):
            heading = Text(f"  {i:2d}. ", style="bold")
            heading.append(f"{key.upper()}:", style="critical" if is_priority_fix(key) else "bold")
            self.console.print(heading)
            for line in text.splitlines():
                self.console.print(Text(f"      {line}"))

    def _render_inventory(self, inventory: dict):
        if not inventory:
            return
        table = Table(title="Detected Hardware", show_header=True, header_style="bold magenta", box=self.box)
        table.add_column("Type", style="info")
        table.add_column("Devices")
        for kind, listing in inventory.items():
            table.add_row(kind.capitalize(), Text(listing))
        self.console.print()
        self.console.print(table)

    def _render_recommendations(self, sections):
        if not sections:
            return
        self.console.print()
        self.console.print("[banner]HARDWARE-SPECIFIC RECOMMENDATIONS:[/banner]")
        for title, lines in sections:
            self.console.print(f"* [info]{escape(title)}:[/info]")
            for line in lines:
                self.console.print(Text(f"  - {line}"))

    def _render_checklists(self):
        box_mark = "[ ]" if self.ascii_only else "□"
        self.console.print()
        self.console.print("[pass]SYSTEM MAINTENANCE CHECKLIST:[/pass]")
        for label, command in MAINTENANCE_CHECKLIST:
            self.console.print(f"{escape(box_mark)} {escape(label)}: [bold]{escape(command)}[/bold]")

        self.console.print()
        self.console.print("[critical]EMERGENCY COMMANDS (if system is unstable):[/critical]")
        for label, command in EMERGENCY_COMMANDS:
            self.console.print(f"* {escape(label)}: [bold]{escape(command)}[/bold]")
