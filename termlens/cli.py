#!/usr/bin/env python3
"""
TermLens CLI Interface
Command-line shell around the term-aware editing engine
"""

import argparse
import asyncio
import html
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.config import TermLensConfig, default_config
from .core.detector import TermOccurrence
from .core.editor import ContentChange, EditorSession
from .core.glossary import TermCatalog

console = Console()


class TermLensCLI:
    """Command-line interface for the TermLens engine"""

    def __init__(self, config: Optional[TermLensConfig] = None, catalog: Optional[TermCatalog] = None):
        self.config = config or default_config
        self.session = EditorSession(catalog=catalog, config=self.config)
        self.catalog = self.session.catalog

    def show_occurrences(self, text: str, occurrences: List[TermOccurrence], title: str = "🔎 Detected Terms"):
        """Display detected terms in a table"""
        if not occurrences:
            console.print("No terms detected.", style="yellow")
            return

        table = Table(title=title)
        table.add_column("Term", style="green")
        table.add_column("Kind", style="cyan")
        table.add_column("Span", style="yellow")
        table.add_column("Definition", overflow="fold")

        for occurrence in occurrences:
            definition, kind = self.session.hover.describe(occurrence.term)
            table.add_row(
                text[occurrence.start:occurrence.end],
                kind,
                f"{occurrence.start}-{occurrence.end}",
                definition,
            )

        console.print(table)

    def annotate_file(self, file_path: str, output_path: Optional[str] = None) -> Optional[str]:
        """Annotate a note file and optionally write the highlighted HTML"""
        path = Path(file_path)
        if not path.exists():
            console.print(f"❌ File not found: {file_path}", style="red")
            return None

        content = path.read_text(encoding="utf-8")
        if path.suffix.lower() not in (".html", ".htm"):
            content = "".join(f"<p>{html.escape(line)}</p>" for line in content.splitlines() if line.strip())

        with console.status("[bold green]Annotating..."):
            self.session.open(content)

        self.show_occurrences(self.session.plain_text, self.session.occurrences,
                              title=f"🔎 Terms in {path.name}")

        annotated = self.session.annotated_content
        if output_path:
            Path(output_path).write_text(annotated, encoding="utf-8")
            console.print(f"✅ Wrote annotated note to {output_path}", style="green")

        return annotated

    def define(self, term: str):
        """Show the popup text for a term"""
        definition, kind = self.session.hover.describe(term)
        style = "cyan" if kind == "catalog" else "yellow"
        label = "✨ Glossary" if kind == "catalog" else "ℹ️  Basic Information"
        console.print(Panel(definition, title=f"{term} · {label}", border_style=style))

    def search(self, query: str):
        """Search the glossary"""
        results = self.catalog.search_terms(query)
        if not results:
            console.print(f"No glossary terms match '{query}'", style="yellow")
            return

        table = Table(title=f"📖 Glossary matches for '{query}'")
        table.add_column("Term", style="green")
        table.add_column("Definition", overflow="fold")
        for term, definition in results[:20]:
            table.add_row(term, definition)
        console.print(table)

    def export_glossary(self, format: str, output_path: Optional[str] = None):
        """Export the glossary to stdout or a file"""
        try:
            exported = self.catalog.export_glossary(format)
        except ValueError as e:
            console.print(f"❌ {e}", style="red")
            return

        if output_path:
            Path(output_path).write_text(exported, encoding="utf-8")
            console.print(f"✅ Exported glossary to {output_path}", style="green")
        else:
            console.print(exported, markup=False, highlight=False)

    async def _debounced_demo(self, edits: List[str]) -> int:
        changes: List[ContentChange] = []
        session = EditorSession(catalog=self.catalog, config=self.config, on_change=changes.append)
        session.open("")

        for snapshot in edits:
            session.handle_edit(snapshot)
            await asyncio.sleep(0.05)

        await asyncio.sleep(session.scheduler.debounce_ms / 1000.0 + 0.2)
        console.print(f"Emitted {len(changes)} content changes, last title: '{changes[-1].title}'")
        self.show_occurrences(session.plain_text, session.occurrences)
        return session.rescan_count

    def selftest(self) -> bool:
        """Run the engine end to end on a sample note"""
        console.print(Panel("🧪 Running Self-Test", style="bold magenta"))

        console.print("\n1️⃣ Annotating sample content...")
        self.session.open("<p>I use <strong>React</strong> and javascript daily.</p>")
        self.show_occurrences(self.session.plain_text, self.session.occurrences)

        console.print("\n2️⃣ Resolving hover definitions...")
        for offset in (7, 18, 28):
            state = self.session.pointer_enter_offset(offset, 100, 100)
            if state:
                console.print(f"[cyan]{state.title}[/cyan] ({state.classification}): {state.definition}")

        console.print("\n3️⃣ Debouncing a burst of edits...")
        edits = [
            "<p>machine</p>",
            "<p>machine learning</p>",
            "<p>machine learning models</p>",
        ]
        rescans = asyncio.run(self._debounced_demo(edits))

        ok = rescans == 1
        if ok:
            console.print("\n✅ Self-test completed successfully!", style="green")
        else:
            console.print(f"\n❌ Expected one rescan, saw {rescans}", style="red")
        return ok

    def interactive_mode(self):
        """Type note lines and see the terms they contain"""
        console.print(Panel(
            "[bold cyan]TermLens Interactive Mode[/bold cyan]\n"
            "Type note text, or use commands:\n"
            "  /help - Show commands\n"
            "  /define <term> - Show a term's definition\n"
            "  /search <query> - Search the glossary\n"
            "  /note - Show the note as persisted\n"
            "  /clear - Start a new note\n"
            "  /exit - Exit",
            title="🔎 Welcome to TermLens",
            border_style="cyan"
        ))

        lines: List[str] = []
        while True:
            try:
                line = console.input("\n[bold cyan]Note:[/bold cyan] ")

                if line.startswith("/"):
                    if self._handle_command(line, lines):
                        break
                elif line.strip():
                    lines.append(line)
                    self.session.open("".join(f"<p>{html.escape(entry)}</p>" for entry in lines))
                    self.show_occurrences(self.session.plain_text, self.session.occurrences)

            except (KeyboardInterrupt, EOFError):
                console.print("\n👋 Goodbye!", style="yellow")
                break

    def _handle_command(self, command: str, lines: List[str]) -> bool:
        """Handle special commands; returns True to exit"""
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()

        if cmd == "/exit":
            console.print("👋 Goodbye!", style="yellow")
            return True

        elif cmd == "/help":
            help_text = """
[bold]Available Commands:[/bold]
  /help            - Show this help
  /define <term>   - Show a term's definition
  /search <query>  - Search the glossary
  /note            - Show the note as persisted
  /clear           - Start a new note
  /exit            - Exit the program
            """
            console.print(Panel(help_text, title="Help", border_style="green"))

        elif cmd == "/define" and len(parts) > 1:
            self.define(parts[1])

        elif cmd == "/search" and len(parts) > 1:
            self.search(parts[1])

        elif cmd == "/note":
            console.print(self.session.content or "[dim](empty)[/dim]", highlight=False)

        elif cmd == "/clear":
            lines.clear()
            self.session.open("")
            console.print("Started a new note.", style="green")

        else:
            console.print(f"Unknown command: {cmd}", style="red")

        return False


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="TermLens - term-aware note editing engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode
  termlens

  # Annotate a note and write highlighted HTML
  termlens --annotate note.html --output note.annotated.html

  # Look up a term
  termlens --define "machine learning"

  # Export the glossary
  termlens --export-glossary csv --output glossary.csv

  # Self-test
  termlens --selftest
        """
    )

    parser.add_argument("--annotate", "-a", help="Note file to annotate (HTML or plain text)")
    parser.add_argument("--define", "-d", help="Term to define")
    parser.add_argument("--search", "-s", help="Search the glossary")
    parser.add_argument(
        "--export-glossary", "-e",
        choices=["json", "yaml", "csv", "html"],
        help="Export the glossary in the given format"
    )
    parser.add_argument("--output", "-o", help="Output file for --annotate or --export-glossary")
    parser.add_argument("--glossary", "-g", help="Custom glossary file (YAML or JSON)")
    parser.add_argument("--config", "-c", help="Configuration file (YAML)")
    parser.add_argument("--selftest", action="store_true", help="Run self-test with sample data")

    args = parser.parse_args(argv)

    try:
        config = TermLensConfig.load_from_file(args.config) if args.config else TermLensConfig()
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        return 1
    if args.glossary:
        config.glossary_path = args.glossary

    logging.basicConfig(level=getattr(logging, str(config.log_level).upper(), logging.INFO))

    try:
        cli = TermLensCLI(config=config)
    except ValueError as e:
        console.print(f"❌ {e}", style="red")
        return 1

    if args.selftest:
        return 0 if cli.selftest() else 1

    if args.annotate:
        if cli.annotate_file(args.annotate, args.output) is None:
            return 1

    if args.define:
        cli.define(args.define)

    if args.search:
        cli.search(args.search)

    if args.export_glossary:
        output = None if args.annotate else args.output
        cli.export_glossary(args.export_glossary, output)

    # Enter interactive mode if no specific action
    if not any([args.annotate, args.define, args.search, args.export_glossary]):
        cli.interactive_mode()

    return 0


if __name__ == "__main__":
    sys.exit(main())
