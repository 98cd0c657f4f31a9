import logging
from pathlib import Path
from typing import List, Optional

from rich.markup import escape
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Footer, Header, Label, LoadingIndicator, Markdown, Tree

from deptree.__version__ import __version__
from deptree.core.cache import MetadataCache
from deptree.core.manifest import MANIFEST_FILE, ManifestAnalysis, load_manifest
from deptree.core.model import DependencyNode
from deptree.core.service import build_trees


class PackageScreen(ModalScreen):
    """Modal with the details of one resolved package."""

    DEFAULT_CSS = """
    PackageScreen { align: center middle; }
    #dialog {
        width: 80%;
        height: 80%;
        border: round $primary;
        background: $surface;
    }
    #title { width: 100%; text-style: bold; background: $primary; padding: 0 1; }
    #content-scroll { height: 1fr; }
    #close-btn { width: 100%; }
    """

    def __init__(self, node: DependencyNode) -> None:
        super().__init__()
        self.node = node

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label(f"{self.node.name} v{self.node.version}", id="title"),
            VerticalScroll(
                Markdown(build_report(self.node)),
                id="content-scroll"
            ),
            Button("Close (Esc)", variant="primary", id="close-btn"),
            id="dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss()

    def key_escape(self) -> None:
        self.dismiss()


def build_report(node: DependencyNode) -> str:
    md_output = [f"# {node.name}@{node.version}\n"]
    md_output.append(f"- **Depth**: {node.depth}")
    md_output.append(f"- **Kind**: {node_kind(node)}")

    if node.is_circular:
        md_output.append("\n_Circular reference: this package is already an ancestor on this path, "
                         "its dependencies are not expanded again._")
        return "\n".join(md_output)

    md_output.append(f"- **Resolved dependencies**: {len(node.children)}")
    md_output.append(f"- **Packages in subtree**: {sum(1 for _ in node.walk()) - 1}\n")

    if node.children:
        md_output.append("### Dependencies\n")
        for child in node.children:
            marker = " ⟳" if child.is_circular else ""
            md_output.append(f"- `{child.name}` {child.version} ({node_kind(child)}){marker}")

    return "\n".join(md_output)


def node_kind(node: DependencyNode) -> str:
    if node.is_dev:
        return "dev"
    if node.is_peer:
        return "peer"
    return "production"


def node_label(node: DependencyNode) -> str:
    safe_name = escape(node.name)
    safe_ver = escape(node.version)

    child_count = len(node.children)
    count_suffix = f" [dim]↳[/] {child_count}" if child_count > 0 else ""

    if node.is_circular:
        return f"[bold red]⟳ {safe_name}[/] [dim]{safe_ver}[/] [red](circular)[/]"
    if node.is_dev:
        return f"[blue](d) {safe_name} [dim]{safe_ver}[/][/]{count_suffix}"
    if node.is_peer:
        return f"[magenta](p) {safe_name} [dim]{safe_ver}[/][/]{count_suffix}"
    return f"[green](•) {safe_name} [dim]{safe_ver}[/][/]{count_suffix}"


class DeptreeApp(App):
    TITLE = "deptree"
    SUB_TITLE = f"v{__version__}"

    DEFAULT_CSS = """
    #info-bar { height: 1; dock: top; background: $boost; }
    .info-label { width: auto; padding: 0 2; }
    #tree-container { height: 1fr; }
    #loading-container { height: 100%; align: center middle; }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("l", "expand_node", "Expand"),
        Binding("h", "collapse_node", "Collapse"),
        Binding("p", "toggle_filter", "Prod Only"),
    ]

    show_only_production: bool = False

    def __init__(self, manifest_path: Path = Path(MANIFEST_FILE), cache: Optional[MetadataCache] = None) -> None:
        super().__init__()
        self.manifest_path = manifest_path
        self.cache = cache or MetadataCache()
        self.analysis: Optional[ManifestAnalysis] = None
        self.forest: List[DependencyNode] = []

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with Horizontal(id="info-bar"):
            yield Label("[b]Context:[/b] [cyan]...[/]", id="lbl-context", classes="info-label")
            yield Label("[b]Total:[/b] [blue]0[/]", id="lbl-total", classes="info-label")
            yield Label("[b]Dev:[/b] [blue]0[/]", id="lbl-dev", classes="info-label")
            yield Label("[b]Peer:[/b] [magenta]0[/]", id="lbl-peer", classes="info-label")
            yield Label("[b]Duplicates:[/b] [yellow]0[/]", id="lbl-dups", classes="info-label")
            yield Label("[b]Resolved:[/b] [green]0[/]", id="lbl-resolved", classes="info-label")

        with Container(id="main-area"):
            with Container(id="loading-container"):
                yield LoadingIndicator()
                yield Label("Initializing deptree...", id="status-label")

            with Container(id="tree-container"):
                yield Tree("Root", id="dep-tree")

        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#tree-container").display = False
        self.resolve_project()

    @property
    def dep_tree(self) -> Tree:
        return self.query_one("#dep-tree", Tree)

    # --- ACTIONS ---

    def action_cursor_down(self) -> None:
        self.dep_tree.action_cursor_down()

    def action_cursor_up(self) -> None:
        self.dep_tree.action_cursor_up()

    def action_expand_node(self) -> None:
        node = self.dep_tree.cursor_node
        if node is not None:
            node.expand()

    def action_collapse_node(self) -> None:
        # Collapse the current branch, or jump back to its parent when already closed
        node = self.dep_tree.cursor_node
        if node is None:
            return
        if node.is_expanded:
            node.collapse()
        elif node.parent is not None:
            self.dep_tree.move_cursor(node.parent)
            node.parent.collapse()

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        if isinstance(event.node.data, DependencyNode):
            self.push_screen(PackageScreen(event.node.data))

    def action_toggle_filter(self) -> None:
        self.show_only_production = not self.show_only_production

        status = "enabled" if self.show_only_production else "disabled"
        self.notify(f"Production-only view {status}.", severity="information")

        if self.analysis:
            self.render_tree()

    # --- LOGIC ---

    def update_status(self, msg: str) -> None:
        self.query_one("#status-label", Label).update(msg)

    def update_dashboard_ui(self) -> None:
        analysis = self.analysis
        self.query_one("#lbl-context", Label).update(f"[b]Context:[/b] [cyan]{escape(analysis.name)}[/]")
        self.query_one("#lbl-total", Label).update(f"[b]Total:[/b] [blue]{analysis.total}[/]")
        self.query_one("#lbl-dev", Label).update(f"[b]Dev:[/b] [blue]{analysis.dev}[/]")
        self.query_one("#lbl-peer", Label).update(f"[b]Peer:[/b] [magenta]{analysis.peer}[/]")
        self.query_one("#lbl-dups", Label).update(f"[b]Duplicates:[/b] [yellow]{len(analysis.duplicates)}[/]")
        self.query_one("#lbl-resolved", Label).update(f"[b]Resolved:[/b] [green]{len(self.forest)}[/]")

    def show_error(self, message: str) -> None:
        self.query_one("#status-label", Label).update(f"[bold red]Fatal Error:[/]\n{escape(message)}")
        self.query_one("LoadingIndicator").display = False

    @work(thread=False)
    async def resolve_project(self) -> None:
        try:
            logging.info("Worker started.")
            self.update_status(f"Reading {self.manifest_path}...")

            self.analysis = load_manifest(self.manifest_path)
            self.update_dashboard_ui()

            self.update_status(f"Resolving {self.analysis.total} packages from the registry...")
            self.forest = await build_trees(self.analysis.roots, self.cache)

            self.update_dashboard_ui()
            self.render_tree()

        except Exception as e:
            logging.exception("Fatal error in worker:")
            self.show_error(str(e))

    def render_tree(self) -> None:
        tree = self.dep_tree
        tree.clear()
        tree.root.label = f"📂 {escape(self.analysis.name)}"
        tree.root.expand()

        def add_nodes(tree_node, data_node):
            for child in data_node.children:
                new_node = tree_node.add(node_label(child), data=child)
                add_nodes(new_node, child)

        for root in self.forest:
            if self.show_only_production and (root.is_dev or root.is_peer):
                continue
            root_node = tree.root.add(node_label(root), data=root)
            add_nodes(root_node, root)

        self.query_one("#loading-container").display = False
        self.query_one("#tree-container").display = True
        tree.focus()
