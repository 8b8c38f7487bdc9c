"""Main ZXplorer application."""

import logging
import sys
from pathlib import Path
from typing import Optional

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gio, GLib, Adw

import cairo

from zxplorer import __version__, __app_id__
from zxplorer.controller import InteractionController
from zxplorer.canvas import DiagramCanvas
from zxplorer.examples import example_graph
from zxplorer.export import DiagramExporter, get_export_dir
from zxplorer.graph import Vertex, VertexType, EdgeType
from zxplorer.settings import EditorSettings, SettingsStore
from zxplorer.simplify import RULES
from zxplorer.tools import ToolMode
from zxplorer.widgets import PhaseDialog, ShortcutsDialog, SettingsDialog

logger = logging.getLogger(__name__)


class ZXplorerWindow(Adw.ApplicationWindow):
    """Main application window."""

    VERTEX_TYPES = [VertexType.Z, VertexType.X, VertexType.H_BOX, VertexType.BOUNDARY]
    EDGE_TYPES = [EdgeType.SIMPLE, EdgeType.HADAMARD]

    def __init__(self, app: Adw.Application, store: SettingsStore, settings: EditorSettings):
        super().__init__(application=app)
        self.store = store
        self.settings = settings
        self.current_path: Optional[Path] = None
        self._phase_dialog: Optional[PhaseDialog] = None
        self._syncing = False

        self.controller = InteractionController(settings=settings)
        self.controller.on_message = self._show_toast
        self.controller.on_phase_edit = self._edit_phase
        self.controller.on_save_requested = self._on_save
        self.controller.on_help_requested = self._show_shortcuts
        self.controller.on_modal_cancel = self._cancel_modal
        self.controller.on_setting_changed = self.store.set_setting

        self.exporter = DiagramExporter(settings.scale)

        self.set_title("ZXplorer")
        self.set_default_size(1280, 820)

        self._build_ui()
        self._setup_shortcuts()

        if settings.load_example:
            self.controller.load_graph(example_graph(), "Load example")
            self.controller.history.clear()
        self._sync_header()
        self._update_status()

    def _build_ui(self):
        """Build the main UI layout."""
        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
        main_box.append(self._build_header())

        self.canvas = DiagramCanvas(self.controller)
        self.canvas.on_state_changed = self._on_state_changed
        self.canvas.on_pointer_moved = self._on_pointer_moved

        # Wrap in toast overlay for in-app notifications
        self.toast_overlay = Adw.ToastOverlay()
        self.toast_overlay.set_child(self.canvas)
        self.toast_overlay.set_vexpand(True)
        main_box.append(self.toast_overlay)

        # Status bar
        status_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=16)
        status_box.set_margin_start(12)
        status_box.set_margin_end(12)
        status_box.set_margin_top(4)
        status_box.set_margin_bottom(4)
        self.status_label = Gtk.Label()
        self.status_label.set_halign(Gtk.Align.START)
        self.status_label.set_hexpand(True)
        self.status_label.add_css_class("dim-label")
        status_box.append(self.status_label)
        self.position_label = Gtk.Label()
        self.position_label.add_css_class("dim-label")
        status_box.append(self.position_label)
        main_box.append(status_box)

        self.set_content(main_box)
        self.canvas.grab_focus()

    def _build_header(self) -> Adw.HeaderBar:
        """Build the header bar."""
        header = Adw.HeaderBar()

        self.window_title = Adw.WindowTitle(title="ZXplorer", subtitle="Untitled")
        header.set_title_widget(self.window_title)

        # Main menu
        menu_btn = Gtk.MenuButton()
        menu_btn.set_icon_name("open-menu-symbolic")
        menu_btn.set_tooltip_text("Menu")

        menu = Gio.Menu()

        file_section = Gio.Menu()
        file_section.append("New Diagram", "win.new")
        file_section.append("Open…", "win.open")
        file_section.append("Save", "win.save")
        file_section.append("Save As…", "win.save-as")
        menu.append_section(None, file_section)

        export_section = Gio.Menu()
        export_menu = Gio.Menu()
        export_menu.append("Export as PNG…", "win.export-png")
        export_menu.append("Export as PDF…", "win.export-pdf")
        export_menu.append("Export as SVG…", "win.export-svg")
        export_section.append_submenu("Export", export_menu)
        menu.append_section(None, export_section)

        view_section = Gio.Menu()
        view_section.append("Toggle Grid", "win.toggle-grid")
        view_section.append("Zoom to Fit", "win.zoom-fit")
        view_section.append("Reset View", "win.reset-view")
        menu.append_section(None, view_section)

        help_section = Gio.Menu()
        help_section.append("Keyboard Shortcuts", "win.show-shortcuts")
        help_section.append("Preferences", "win.show-preferences")
        help_section.append("About ZXplorer", "win.show-about")
        menu.append_section(None, help_section)

        popover = Gtk.PopoverMenu()
        popover.set_menu_model(menu)
        menu_btn.set_popover(popover)
        header.pack_end(menu_btn)

        # Tool buttons
        tool_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL)
        tool_box.add_css_class("linked")
        self.tool_buttons = {}
        group = None
        for mode, icon, key in ((ToolMode.SELECT, "edit-select-symbolic", "S"),
                                (ToolMode.VERTEX, "list-add-symbolic", "V"),
                                (ToolMode.EDGE, "mail-forward-symbolic", "W")):
            button = Gtk.ToggleButton()
            button.set_icon_name(icon)
            button.set_tooltip_text(f"{mode.label} ({key})")
            if group is not None:
                button.set_group(group)
            group = group or button
            button.connect("toggled", self._on_tool_toggled, mode)
            tool_box.append(button)
            self.tool_buttons[mode] = button
        header.pack_start(tool_box)

        # Vertex and edge types for new elements
        self.vertex_dropdown = Gtk.DropDown(
            model=Gtk.StringList.new([t.label for t in self.VERTEX_TYPES]))
        self.vertex_dropdown.set_tooltip_text("Vertex type")
        self.vertex_dropdown.connect("notify::selected", self._on_vertex_type_changed)
        header.pack_start(self.vertex_dropdown)

        self.edge_dropdown = Gtk.DropDown(
            model=Gtk.StringList.new([f"{t.label} edge" for t in self.EDGE_TYPES]))
        self.edge_dropdown.set_tooltip_text("Edge type")
        self.edge_dropdown.connect("notify::selected", self._on_edge_type_changed)
        header.pack_start(self.edge_dropdown)

        # Simplification menu
        simplify_btn = Gtk.MenuButton()
        simplify_btn.set_label("Simplify")
        simplify_menu = Gio.Menu()
        for rule in RULES.values():
            simplify_menu.append(rule.title, f"win.simplify-{rule.name}")
        simplify_btn.set_menu_model(simplify_menu)
        header.pack_end(simplify_btn)

        # Undo/redo
        redo_btn = Gtk.Button()
        redo_btn.set_icon_name("edit-redo-symbolic")
        redo_btn.set_tooltip_text("Redo (Ctrl+Y)")
        redo_btn.connect("clicked", lambda b: self.controller.redo())
        self.redo_btn = redo_btn
        undo_btn = Gtk.Button()
        undo_btn.set_icon_name("edit-undo-symbolic")
        undo_btn.set_tooltip_text("Undo (Ctrl+Z)")
        undo_btn.connect("clicked", lambda b: self.controller.undo())
        self.undo_btn = undo_btn
        header.pack_end(redo_btn)
        header.pack_end(undo_btn)

        return header

    def _setup_shortcuts(self):
        """Setup window actions.

        Editing keys (undo, copy, zoom...) are handled by the canvas, so only
        window-level actions get accelerators here.
        """
        actions = [
            ("new", self._on_new, "<Control>n"),
            ("open", self._on_open, "<Control>o"),
            ("save", self._on_save, None),
            ("save-as", self._on_save_as, "<Control><Shift>s"),
            ("export-png", lambda: self._export("png"), None),
            ("export-pdf", lambda: self._export("pdf"), None),
            ("export-svg", lambda: self._export("svg"), None),
            ("toggle-grid", self._toggle_grid, None),
            ("zoom-fit", self._zoom_fit, None),
            ("reset-view", self._reset_view, None),
            ("show-shortcuts", self._show_shortcuts, "F1"),
            ("show-preferences", self._show_preferences, "<Control>comma"),
            ("show-about", self._show_about, None),
            ("quit", lambda: self.close(), "<Control>q"),
        ]
        for rule in RULES.values():
            actions.append((f"simplify-{rule.name}",
                            lambda name=rule.name: self.controller.simplify(name), None))

        for name, callback, accel in actions:
            action = Gio.SimpleAction.new(name, None)
            action.connect("activate", lambda a, p, cb=callback: cb())
            self.add_action(action)

            if accel:
                self.get_application().set_accels_for_action(f"win.{name}", [accel])

    # ==================== State sync ====================

    def _on_state_changed(self):
        self._sync_header()
        self._update_status()

    def _sync_header(self):
        """Reflect controller state in the header widgets without feeding back."""
        self._syncing = True
        try:
            self.tool_buttons[self.controller.tool].set_active(True)
            self.vertex_dropdown.set_selected(
                self.VERTEX_TYPES.index(self.controller.state.vertex_type))
            self.edge_dropdown.set_selected(
                self.EDGE_TYPES.index(self.controller.state.edge_type))
            self.undo_btn.set_sensitive(self.controller.history.can_undo)
            self.redo_btn.set_sensitive(self.controller.history.can_redo)
        finally:
            self._syncing = False

    def _update_status(self):
        graph = self.controller.graph
        parts = [f"{graph.num_vertices()} vertices, {graph.num_edges()} edges"]
        selected = self.controller.describe_selection()
        if selected:
            parts.append(f"selected: {selected}")
        parts.append(f"{self.controller.viewport.zoom * 100:.0f}%")
        parts.append(self.controller.tool.label)
        self.status_label.set_text("  |  ".join(parts))

    def _on_pointer_moved(self, row: float, col: float):
        self.position_label.set_text(f"row {row:g}, col {col:g}")

    def _on_tool_toggled(self, button, mode: ToolMode):
        if self._syncing or not button.get_active():
            return
        self.controller.set_tool(mode)
        self.canvas.grab_focus()

    def _on_vertex_type_changed(self, dropdown, _param):
        if self._syncing:
            return
        self.controller.set_vertex_type(self.VERTEX_TYPES[dropdown.get_selected()])
        self.canvas.grab_focus()

    def _on_edge_type_changed(self, dropdown, _param):
        if self._syncing:
            return
        self.controller.set_edge_type(self.EDGE_TYPES[dropdown.get_selected()])
        self.canvas.grab_focus()

    def _set_current_path(self, path: Optional[Path]):
        self.current_path = path
        self.window_title.set_subtitle(path.name if path else "Untitled")

    # ==================== Phase editing ====================

    def _edit_phase(self, vertex: Vertex):
        """Open the phase editor; the canvas ignores keys while it is open."""
        if self._phase_dialog is not None:
            return
        dialog = PhaseDialog(self, vertex)
        dialog.on_apply = lambda v, text: self.controller.set_phase(v.id, text)
        dialog.connect("destroy", self._on_phase_dialog_closed)
        self._phase_dialog = dialog
        self.controller.modal_active = True
        dialog.present()
        dialog.entry.grab_focus()

    def _on_phase_dialog_closed(self, dialog):
        self._phase_dialog = None
        self.controller.modal_active = False
        self.canvas.grab_focus()

    def _cancel_modal(self):
        if self._phase_dialog is not None:
            self._phase_dialog.cancel()

    # ==================== Files ====================

    def _json_filters(self) -> Gio.ListStore:
        filter_json = Gtk.FileFilter()
        filter_json.set_name("ZX-diagrams (JSON)")
        filter_json.add_pattern("*.json")
        filter_json.add_mime_type("application/json")
        filters = Gio.ListStore.new(Gtk.FileFilter)
        filters.append(filter_json)
        return filters

    def _on_new(self):
        self.controller.new_diagram()
        self._set_current_path(None)

    def _on_open(self):
        dialog = Gtk.FileDialog()
        dialog.set_title("Open Diagram")
        dialog.set_filters(self._json_filters())
        dialog.open(self, None, self._on_open_response)

    def _on_open_response(self, dialog, result):
        try:
            file = dialog.open_finish(result)
        except GLib.Error:
            return  # User cancelled
        if not file or not file.get_path():
            return
        path = Path(file.get_path())
        try:
            data = path.read_text(encoding="utf-8")
        except OSError as exc:
            self._show_toast(f"Could not open {path.name}: {exc.strerror}")
            return
        if self.controller.load_snapshot(data):
            self._set_current_path(path)
            self.controller.zoom_to_fit()
            self.canvas.queue_draw()
            logger.info(f"Opened {path}")

    def _on_save(self):
        if self.current_path is None:
            self._on_save_as()
        else:
            self._write(self.current_path)

    def _on_save_as(self):
        dialog = Gtk.FileDialog()
        dialog.set_title("Save Diagram")
        dialog.set_initial_name(self.current_path.name if self.current_path else "diagram.json")
        dialog.set_filters(self._json_filters())
        dialog.save(self, None, self._on_save_response)

    def _on_save_response(self, dialog, result):
        try:
            file = dialog.save_finish(result)
        except GLib.Error:
            return
        if file and file.get_path():
            self._write(Path(file.get_path()))

    def _write(self, path: Path):
        try:
            path.write_text(self.controller.export_snapshot(), encoding="utf-8")
        except OSError as exc:
            self._show_toast(f"Could not save {path.name}: {exc.strerror}")
            return
        self._set_current_path(path)
        self._show_toast(f"Saved to {path}")
        logger.info(f"Saved {path}")

    # ==================== Export ====================

    EXPORT_FORMATS = {
        "png": ("PNG Images", "image/png"),
        "pdf": ("PDF Documents", "application/pdf"),
        "svg": ("SVG Images", "image/svg+xml"),
    }

    def _export(self, fmt: str):
        if self.controller.graph.is_empty():
            self._show_toast("Nothing to export")
            return
        name, mime = self.EXPORT_FORMATS[fmt]
        stem = self.current_path.stem if self.current_path else "diagram"

        dialog = Gtk.FileDialog()
        dialog.set_title(f"Export as {fmt.upper()}")
        dialog.set_initial_name(f"{stem}.{fmt}")
        dialog.set_initial_folder(Gio.File.new_for_path(str(get_export_dir())))

        file_filter = Gtk.FileFilter()
        file_filter.set_name(name)
        file_filter.add_mime_type(mime)
        filters = Gio.ListStore.new(Gtk.FileFilter)
        filters.append(file_filter)
        dialog.set_filters(filters)

        dialog.save(self, None, self._on_export_response, fmt)

    def _on_export_response(self, dialog, result, fmt: str):
        try:
            file = dialog.save_finish(result)
        except GLib.Error:
            return
        if not file:
            return
        filepath = file.get_path()
        if not filepath:
            self._show_toast("Export failed: selected location is not a local file")
            return

        self.exporter.renderer.scale = self.settings.scale
        export = {
            "png": self.exporter.export_png,
            "pdf": self.exporter.export_pdf,
            "svg": self.exporter.export_svg,
        }[fmt]
        try:
            ok = export(self.controller.graph, filepath, edges=self.controller.edges)
        except (OSError, cairo.Error) as exc:
            logger.error(f"Export to {filepath} failed: {exc}")
            ok = False
        self._show_toast(f"Exported to {filepath}" if ok else "Export failed")

    # ==================== View ====================

    def _toggle_grid(self):
        self.controller.toggle_grid()

    def _zoom_fit(self):
        self.controller.zoom_to_fit()
        self._on_state_changed()
        self.canvas.queue_draw()

    def _reset_view(self):
        self.controller.reset_view()
        self._on_state_changed()
        self.canvas.queue_draw()

    # ==================== Dialogs ====================

    def _show_shortcuts(self):
        dialog = ShortcutsDialog(self)
        dialog.present()

    def _show_preferences(self):
        dialog = SettingsDialog(self, self.store, self.settings)
        dialog.on_settings_changed = self._on_settings_changed
        dialog.present()

    def _on_settings_changed(self, key: str, value):
        """Handle real-time setting changes from preferences dialog."""
        self.controller.apply_settings(self.settings)
        if key == "default_vertex_type":
            self.controller.set_vertex_type(VertexType(value))
        elif key == "default_edge_type":
            self.controller.set_edge_type(EdgeType(value))

    def _show_about(self):
        about = Adw.AboutWindow(
            transient_for=self,
            application_name="ZXplorer",
            application_icon="applications-science",
            developer_name="ZXplorer Project",
            version=__version__,
            license_type=Gtk.License.MIT_X11,
            comments="An interactive editor for ZX-diagrams",
        )
        about.present()

    def _show_toast(self, message: str):
        """Show a toast notification."""
        toast = Adw.Toast(title=message)
        toast.set_timeout(3)
        self.toast_overlay.add_toast(toast)


class ZXplorerApp(Adw.Application):
    """Main application class."""

    def __init__(self):
        super().__init__(
            application_id=__app_id__,
            flags=Gio.ApplicationFlags.DEFAULT_FLAGS
        )
        self.store: Optional[SettingsStore] = None
        self.settings: Optional[EditorSettings] = None
        self.window: Optional[ZXplorerWindow] = None

    def do_startup(self):
        """Initialize application."""
        Adw.Application.do_startup(self)
        self.store = SettingsStore()
        self.settings = EditorSettings.load(self.store)

    def do_activate(self):
        """Activate application."""
        if not self.window:
            self.window = ZXplorerWindow(self, self.store, self.settings)
        self.window.present()

    def do_shutdown(self):
        """Shutdown application."""
        if self.store:
            self.store.close()
        Adw.Application.do_shutdown(self)


def main() -> int:
    """Application entry point."""
    app = ZXplorerApp()
    return app.run(sys.argv)


if __name__ == "__main__":
    sys.exit(main())
