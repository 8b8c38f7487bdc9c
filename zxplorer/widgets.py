"""Dialogs for ZXplorer."""

import logging
from typing import Optional, Callable

import gi
gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gdk, Adw

from zxplorer.graph import Vertex, VertexType, EdgeType, format_phase
from zxplorer.settings import EditorSettings, SettingsStore

logger = logging.getLogger(__name__)


class PhaseDialog(Gtk.Window):
    """Modal editor for a spider's phase, entered as a multiple of π."""

    PRESETS = ["0", "1/4", "1/2", "3/4", "1", "-1/4", "-1/2", "-1"]

    def __init__(self, parent: Gtk.Window, vertex: Vertex):
        super().__init__()
        self.vertex = vertex

        # Callbacks
        self.on_apply: Optional[Callable[[Vertex, str], bool]] = None
        self.on_cancel: Optional[Callable[[], None]] = None

        self.set_transient_for(parent)
        self.set_modal(True)
        self.set_resizable(False)
        self.set_title("Edit Phase")

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        box.set_margin_start(18)
        box.set_margin_end(18)
        box.set_margin_top(18)
        box.set_margin_bottom(18)

        hint = Gtk.Label(label='Enter phase as a multiple of π (e.g. "0", "1/2", "1", "3/4")')
        hint.set_wrap(True)
        hint.add_css_class("dim-label")
        box.append(hint)

        presets = Gtk.FlowBox()
        presets.set_selection_mode(Gtk.SelectionMode.NONE)
        presets.set_max_children_per_line(4)
        for preset in self.PRESETS:
            button = Gtk.Button(label=format_phase(preset) or "0")
            button.connect("clicked", lambda b, p=preset: self.entry.set_text(p))
            presets.append(button)
        box.append(presets)

        self.entry = Gtk.Entry()
        self.entry.set_text(vertex.phase)
        self.entry.set_placeholder_text("e.g. 1/2")
        self.entry.connect("activate", lambda e: self._apply())
        box.append(self.entry)

        self.error_label = Gtk.Label()
        self.error_label.add_css_class("error")
        self.error_label.set_visible(False)
        box.append(self.error_label)

        buttons = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=8)
        buttons.set_halign(Gtk.Align.END)
        cancel_btn = Gtk.Button(label="Cancel")
        cancel_btn.connect("clicked", lambda b: self.cancel())
        buttons.append(cancel_btn)
        apply_btn = Gtk.Button(label="Apply")
        apply_btn.add_css_class("suggested-action")
        apply_btn.connect("clicked", lambda b: self._apply())
        buttons.append(apply_btn)
        box.append(buttons)

        self.set_child(box)

        key_ctrl = Gtk.EventControllerKey()
        key_ctrl.connect("key-pressed", self._on_key_pressed)
        self.add_controller(key_ctrl)

    def _apply(self):
        text = self.entry.get_text().strip()
        if self.on_apply and not self.on_apply(self.vertex, text):
            self.error_label.set_text(f"Invalid phase: {text!r}")
            self.error_label.set_visible(True)
            return
        self.destroy()

    def cancel(self):
        if self.on_cancel:
            self.on_cancel()
        self.destroy()

    def _on_key_pressed(self, controller, keyval, keycode, state):
        if keyval == Gdk.KEY_Escape:
            self.cancel()
            return True
        return False


class ShortcutsDialog(Gtk.Window):
    """Keyboard shortcuts help dialog."""

    SHORTCUTS = {
        "General": [
            ("New Diagram", "Ctrl+N"),
            ("Open Diagram", "Ctrl+O"),
            ("Save", "Ctrl+S"),
            ("Save As", "Ctrl+Shift+S"),
            ("Preferences", "Ctrl+,"),
            ("Keyboard Shortcuts", "?"),
            ("Quit", "Ctrl+Q"),
        ],
        "Tools": [
            ("Select", "S"),
            ("Place Vertex", "V"),
            ("Draw Edge", "W"),
            ("Draw Edge (Select tool)", "Right-drag between vertices"),
            ("Self-loop", "Right-click a vertex (Select or Edge tool)"),
            ("Add Vertex (Select tool)", "Right-click empty canvas"),
        ],
        "Editing": [
            ("Undo", "Ctrl+Z"),
            ("Redo", "Ctrl+Y or Ctrl+Shift+Z"),
            ("Copy / Paste", "Ctrl+C / Ctrl+V"),
            ("Select All", "Ctrl+A"),
            ("Delete Selection", "Delete / Backspace"),
            ("Convert to Z / X / H-box", "Z / X / H"),
            ("Toggle Edge Type", "E"),
            ("Edit Phase", "Double-click a spider"),
            ("Nudge Selection", "Arrows (Shift: fine)"),
            ("Clear Selection", "Escape"),
        ],
        "View": [
            ("Pan", "Middle-drag, Ctrl+drag or Arrows"),
            ("Zoom", "Ctrl+Scroll"),
            ("Zoom In / Out", "Ctrl++ / Ctrl+-"),
            ("Reset View", "Ctrl+0"),
            ("Toggle Grid", "G"),
        ],
    }

    def __init__(self, parent: Gtk.Window):
        super().__init__()

        self.set_transient_for(parent)
        self.set_modal(True)
        self.set_default_size(460, 600)
        self.set_title("Keyboard Shortcuts")

        scrolled = Gtk.ScrolledWindow()
        scrolled.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=24)
        box.set_margin_start(24)
        box.set_margin_end(24)
        box.set_margin_top(24)
        box.set_margin_bottom(24)

        for section, shortcuts in self.SHORTCUTS.items():
            section_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=8)

            title = Gtk.Label(label=section.upper())
            title.set_halign(Gtk.Align.START)
            title.add_css_class("heading")
            section_box.append(title)

            for action, keys in shortcuts:
                row = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=12)

                action_label = Gtk.Label(label=action)
                action_label.set_halign(Gtk.Align.START)
                action_label.set_hexpand(True)
                row.append(action_label)

                keys_label = Gtk.Label(label=keys)
                keys_label.set_halign(Gtk.Align.END)
                keys_label.add_css_class("dim-label")
                row.append(keys_label)

                section_box.append(row)

            box.append(section_box)

        scrolled.set_child(box)
        self.set_child(scrolled)

        key_ctrl = Gtk.EventControllerKey()
        key_ctrl.connect("key-pressed", self._on_key_pressed)
        self.add_controller(key_ctrl)

    def _on_key_pressed(self, controller, keyval, keycode, state):
        if keyval == Gdk.KEY_Escape:
            self.close()
            return True
        return False


class SettingsDialog(Adw.PreferencesWindow):
    """Settings/preferences dialog."""

    GRID_SIZES = [0.25, 0.5, 1.0]
    VERTEX_TYPES = [VertexType.Z, VertexType.X, VertexType.H_BOX, VertexType.BOUNDARY]
    EDGE_TYPES = [EdgeType.SIMPLE, EdgeType.HADAMARD]

    def __init__(self, parent: Gtk.Window, store: SettingsStore, settings: EditorSettings):
        super().__init__()
        self.store = store
        self.settings = settings

        # Live-apply callback: (key: str, value: Any) -> None
        self.on_settings_changed: Optional[Callable] = None

        self.set_transient_for(parent)
        self.set_modal(True)
        self.set_default_size(560, 480)
        self.set_title("Preferences")

        # Canvas page
        canvas_page = Adw.PreferencesPage()
        canvas_page.set_title("Canvas")
        canvas_page.set_icon_name("applications-graphics-symbolic")

        grid_group = Adw.PreferencesGroup()
        grid_group.set_title("Grid")

        grid_row = Adw.SwitchRow()
        grid_row.set_title("Show Grid")
        grid_row.set_active(settings.show_grid)
        grid_row.connect("notify::active", lambda r, p: self._set("show_grid", r.get_active()))
        grid_group.add(grid_row)

        snap_row = Adw.SwitchRow()
        snap_row.set_title("Snap to Grid")
        snap_row.set_subtitle("Round placed and dragged vertices to grid positions")
        snap_row.set_active(settings.snap_to_grid)
        snap_row.connect("notify::active", lambda r, p: self._set("snap_to_grid", r.get_active()))
        grid_group.add(snap_row)

        size_row = Adw.ComboRow()
        size_row.set_title("Grid Size")
        size_row.set_model(Gtk.StringList.new([f"{s:g}" for s in self.GRID_SIZES]))
        if settings.grid_size in self.GRID_SIZES:
            size_row.set_selected(self.GRID_SIZES.index(settings.grid_size))
        size_row.connect("notify::selected", self._on_grid_size_changed)
        grid_group.add(size_row)

        canvas_page.add(grid_group)
        self.add(canvas_page)

        # Editing page
        editing_page = Adw.PreferencesPage()
        editing_page.set_title("Editing")
        editing_page.set_icon_name("document-edit-symbolic")

        defaults_group = Adw.PreferencesGroup()
        defaults_group.set_title("Defaults")

        vertex_row = Adw.ComboRow()
        vertex_row.set_title("Default Vertex Type")
        vertex_row.set_model(Gtk.StringList.new([t.label for t in self.VERTEX_TYPES]))
        vertex_row.set_selected(self._index_of(self.VERTEX_TYPES, settings.default_vertex_type))
        vertex_row.connect("notify::selected", lambda r, p: self._set(
            "default_vertex_type", int(self.VERTEX_TYPES[r.get_selected()])))
        defaults_group.add(vertex_row)

        edge_row = Adw.ComboRow()
        edge_row.set_title("Default Edge Type")
        edge_row.set_model(Gtk.StringList.new([t.label for t in self.EDGE_TYPES]))
        edge_row.set_selected(self._index_of(self.EDGE_TYPES, settings.default_edge_type))
        edge_row.connect("notify::selected", lambda r, p: self._set(
            "default_edge_type", int(self.EDGE_TYPES[r.get_selected()])))
        defaults_group.add(edge_row)

        example_row = Adw.SwitchRow()
        example_row.set_title("Load Example on Start")
        example_row.set_subtitle("Open the 4-qubit example diagram when the app starts")
        example_row.set_active(settings.load_example)
        example_row.connect("notify::active", lambda r, p: self._set("load_example", r.get_active()))
        defaults_group.add(example_row)

        editing_page.add(defaults_group)
        self.add(editing_page)

    @staticmethod
    def _index_of(options, value: int) -> int:
        for i, option in enumerate(options):
            if int(option) == value:
                return i
        return 0

    def _set(self, key: str, value):
        setattr(self.settings, key, value)
        self.store.set_setting(key, value)
        logger.debug(f"Setting {key}={value!r}")
        if self.on_settings_changed:
            self.on_settings_changed(key, value)

    def _on_grid_size_changed(self, row, param):
        self._set("grid_size", self.GRID_SIZES[row.get_selected()])
