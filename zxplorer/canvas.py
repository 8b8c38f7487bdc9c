"""Canvas widget that forwards input to the controller and paints its state."""

import logging
from typing import Optional, Callable, Tuple

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
from gi.repository import Gtk, Gdk, GLib, Gio

from zxplorer.controller import InteractionController, PointerEvent
from zxplorer.graph import Vertex, VertexType
from zxplorer.geometry import DisplayEdge, graph_to_canvas
from zxplorer.render import DiagramRenderer
from zxplorer.tools import GestureKind

logger = logging.getLogger(__name__)


class DiagramCanvas(Gtk.DrawingArea):
    """Drawing area for a ZX-diagram.

    Holds no editing logic: every event goes to the ``InteractionController``
    and every frame is painted from its state.
    """

    def __init__(self, controller: InteractionController):
        super().__init__()

        self.controller = controller
        self.renderer = DiagramRenderer(controller.settings.scale)

        self.last_mouse_x = 0.0
        self.last_mouse_y = 0.0

        # Context popover tracking
        self._context_popover: Optional[Gtk.PopoverMenu] = None

        # Callbacks
        self.on_pointer_moved: Optional[Callable[[float, float], None]] = None
        self.on_state_changed: Optional[Callable[[], None]] = None

        controller.on_changed = self._on_controller_changed
        controller.on_vertex_menu = self._show_vertex_menu
        controller.on_edge_menu = self._show_edge_menu

        # Setup widget
        self.set_draw_func(self._on_draw)
        self.set_focusable(True)
        self.set_can_focus(True)
        self.set_hexpand(True)
        self.set_vexpand(True)

        self.connect("resize", self._on_resize)
        self._setup_event_controllers()

    def _setup_event_controllers(self):
        """Setup mouse and keyboard event controllers."""
        # Mouse buttons
        click_ctrl = Gtk.GestureClick()
        click_ctrl.set_button(0)  # All buttons
        click_ctrl.connect("pressed", self._on_pressed)
        click_ctrl.connect("released", self._on_released)
        click_ctrl.connect("cancel", self._on_cancel)
        self.add_controller(click_ctrl)

        # Mouse motion
        motion_ctrl = Gtk.EventControllerMotion()
        motion_ctrl.connect("motion", self._on_motion)
        self.add_controller(motion_ctrl)

        # Scroll (pan, Ctrl to zoom)
        scroll_ctrl = Gtk.EventControllerScroll()
        scroll_ctrl.set_flags(Gtk.EventControllerScrollFlags.BOTH_AXES)
        scroll_ctrl.connect("scroll", self._on_scroll)
        self.add_controller(scroll_ctrl)

        # Keyboard
        key_ctrl = Gtk.EventControllerKey()
        key_ctrl.connect("key-pressed", self._on_key_pressed)
        self.add_controller(key_ctrl)

    # ==================== Drawing ====================

    def _on_draw(self, area, cr, width, height):
        """Main drawing function."""
        controller = self.controller
        settings = controller.settings
        viewport = controller.viewport
        self.renderer.scale = settings.scale

        cr.save()
        cr.set_source_rgb(*self.renderer.COLORS['background'])
        cr.paint()

        if settings.show_grid:
            self.renderer.draw_grid(cr, width, height, settings.grid_size,
                                    viewport.zoom, viewport.pan)

        # Apply zoom and pan transformations
        cr.translate(viewport.pan_x, viewport.pan_y)
        cr.scale(viewport.zoom, viewport.zoom)

        self.renderer.draw_diagram(cr, controller.vertices, controller.edges,
                                   controller.selection.vertices, controller.selection.edges)
        self._draw_edge_preview(cr)

        cr.restore()

        rect = controller.gesture.box_rect()
        if rect is not None:
            self.renderer.draw_selection_box(cr, rect)

    def _draw_edge_preview(self, cr):
        gesture = self.controller.gesture
        if gesture.kind != GestureKind.DRAGGING_EDGE or not gesture.moved:
            return
        source = self.controller.find_vertex(gesture.vertex_id)
        if source is None or gesture.preview is None:
            return
        scale = self.controller.settings.scale
        start = graph_to_canvas(source.row, source.col, scale)
        end = graph_to_canvas(gesture.preview[0], gesture.preview[1], scale)
        self.renderer.draw_edge_preview(cr, start, end, self.controller.state.edge_type)

    # ==================== Events ====================

    def _on_controller_changed(self):
        self.queue_draw()
        if self.on_state_changed:
            self.on_state_changed()

    @staticmethod
    def _modifiers(controller) -> Tuple[bool, bool]:
        state = controller.get_current_event_state()
        return (bool(state & Gdk.ModifierType.SHIFT_MASK),
                bool(state & Gdk.ModifierType.CONTROL_MASK))

    def _on_resize(self, area, width, height):
        self.controller.viewport.width = width
        self.controller.viewport.height = height

    def _on_pressed(self, gesture, n_press, x, y):
        # Grab focus so we can receive keyboard events
        self.grab_focus()
        shift, ctrl = self._modifiers(gesture)
        event = PointerEvent(x, y, gesture.get_current_button(), shift, ctrl, n_press)
        self.controller.press(event)
        self.queue_draw()

    def _on_released(self, gesture, n_press, x, y):
        shift, ctrl = self._modifiers(gesture)
        event = PointerEvent(x, y, gesture.get_current_button(), shift, ctrl, n_press)
        self.controller.release(event)
        self.queue_draw()

    def _on_cancel(self, gesture, sequence):
        if self.controller.cancel_gesture():
            self.queue_draw()

    def _on_motion(self, controller, x, y):
        self.last_mouse_x = x
        self.last_mouse_y = y
        if self.controller.motion(x, y):
            self.queue_draw()
        if self.on_pointer_moved:
            self.on_pointer_moved(*self.controller.pointer_graph_pos(x, y))

    def _on_scroll(self, controller, dx, dy):
        _, ctrl = self._modifiers(controller)
        if self.controller.scroll(self.last_mouse_x, self.last_mouse_y, dx, dy, ctrl):
            self.queue_draw()
            return True
        return False

    def _on_key_pressed(self, controller, keyval, keycode, state):
        name = Gdk.keyval_name(keyval)
        if name is None:
            return False
        handled = self.controller.key_press(
            name,
            ctrl=bool(state & Gdk.ModifierType.CONTROL_MASK),
            shift=bool(state & Gdk.ModifierType.SHIFT_MASK),
            alt=bool(state & Gdk.ModifierType.ALT_MASK),
        )
        if handled:
            self.queue_draw()
        return handled

    # ==================== Context menus ====================

    def _show_vertex_menu(self, vertex: Vertex, x: float, y: float):
        menu = Gio.Menu()
        convert = Gio.Menu()
        for vertex_type, name in ((VertexType.Z, "z"), (VertexType.X, "x"),
                                  (VertexType.H_BOX, "h")):
            if vertex.vertex_type != vertex_type:
                convert.append(vertex_type.label, f"canvas.convert-{name}")
        menu.append_section("Convert to", convert)
        edit = Gio.Menu()
        edit.append("Edit Phase…", "canvas.edit-phase")
        edit.append("Delete Vertex", "canvas.delete-vertex")
        menu.append_section(None, edit)

        controller = self.controller
        actions = {
            "convert-z": lambda: controller.convert_vertex(vertex.id, VertexType.Z),
            "convert-x": lambda: controller.convert_vertex(vertex.id, VertexType.X),
            "convert-h": lambda: controller.convert_vertex(vertex.id, VertexType.H_BOX),
            "edit-phase": lambda: controller.on_phase_edit and controller.on_phase_edit(vertex),
            "delete-vertex": lambda: controller.delete_vertex(vertex.id),
        }
        self._popup_menu(menu, actions, x, y)

    def _show_edge_menu(self, display_edge: DisplayEdge, x: float, y: float):
        menu = Gio.Menu()
        target = display_edge.edge.edge_type.toggled()
        menu.append(f"Make {target.label} Edge", "canvas.toggle-edge")
        menu.append("Delete Edge", "canvas.delete-edge")

        key = display_edge.key
        actions = {
            "toggle-edge": lambda: self.controller.toggle_edge_types({key}),
            "delete-edge": lambda: self.controller.delete_edge(key),
        }
        self._popup_menu(menu, actions, x, y)

    def _popup_menu(self, menu: Gio.Menu, actions: dict, x: float, y: float):
        action_group = Gio.SimpleActionGroup()
        for name, callback in actions.items():
            action = Gio.SimpleAction.new(name, None)
            action.connect("activate", lambda a, p, cb=callback: cb())
            action_group.add_action(action)
        self.insert_action_group("canvas", action_group)

        # Unparent previous popover if still attached
        if self._context_popover is not None:
            self._context_popover.unparent()
            self._context_popover = None

        popover = Gtk.PopoverMenu.new_from_model(menu)
        popover.set_parent(self)
        popover.set_has_arrow(True)

        # Defer unparent to idle so the action callback fires first
        def _on_popover_closed(p):
            def _do_unparent():
                if self._context_popover is p:
                    p.unparent()
                    self._context_popover = None
                return False
            GLib.idle_add(_do_unparent)
        popover.connect("closed", _on_popover_closed)

        self._context_popover = popover

        rect = Gdk.Rectangle()
        rect.x = int(x)
        rect.y = int(y)
        rect.width = 1
        rect.height = 1
        popover.set_pointing_to(rect)
        popover.popup()
