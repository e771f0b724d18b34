import logging
import math
from typing import List, Optional, Tuple

import pygame

from features import Action, Feature
from gui import BG, GRID, TEXT_MAIN, TEXT_MUTED, TEXT_SECONDARY, draw_button, role_color
from layout import Frame, frame_for, grid_cell_at, hit_test
from operation import Operation, OperationResult, Outcome
from settings import Pacing
from sound import RecordingSound
from steps import Step
from tutor import TutorBridge

logger = logging.getLogger(__name__)

PANEL_BG = (20, 20, 25)
INPUT_BG = (10, 10, 12)
EMPTY_CELL = (30, 30, 34)

BOXED = {"stack", "queue", "hash_table"}
POINTS = {"convex_hull"}

BUTTON_W = 110
BUTTON_H = 34
BUTTON_GAP = 10


class VizState:
    """One mounted feature: its engine, tutor bridge, text buffer and status line."""

    def __init__(self, feature: Feature, pacing: Optional[Pacing] = None):
        self.feature = feature
        self.sound = RecordingSound()
        self.engine = feature.factory(pacing=pacing, sound=self.sound)
        self.tutor = TutorBridge(self.engine)
        self.text = ""
        self.status = self.engine.message
        self.operation: Optional[Operation] = None
        self.last_result: Optional[OperationResult] = None
        self.dragging_timeline = False
        self.drag_node: Optional[str] = None
        self.last_cell: Optional[Tuple[int, int]] = None

    # --- timeline ---

    @property
    def total_steps(self) -> int:
        return self.engine.player.total_steps

    @property
    def current_index(self) -> int:
        return self.engine.player.index

    @property
    def playing(self) -> bool:
        return self.engine.player.is_playing

    @property
    def running(self) -> bool:
        return self.operation is not None and not self.operation.done

    def set_step(self, step: int):
        if not self.running:
            self.engine.player.seek(step)

    def step_forward(self):
        if not self.running:
            self.engine.player.step_forward()

    def step_backward(self):
        if not self.running:
            self.engine.player.step_backward()

    def toggle_play(self):
        if not self.running:
            self.engine.player.toggle_play()

    # --- text buffer ---

    def type_text(self, text: str):
        if len(self.text) < 24:
            self.text += text

    def backspace(self):
        self.text = self.text[:-1]

    # --- actions ---

    def perform(self, action: Action):
        if action.needs_value and not self.text.strip():
            self.status = "Enter a value first."
            return None
        try:
            outcome = action.handler(self.engine, self.text)
        except ValueError as exc:
            self.status = f"Invalid input: {exc}"
            return None

        if action.needs_value:
            self.text = ""
        if isinstance(outcome, Operation):
            self.operation = outcome
            if outcome.done:
                self._report(outcome.result)
            return outcome
        self._report(outcome)
        return outcome

    def submit(self):
        """Enter key: the feature's first value action, or a tutor highlight for '?value'."""
        if self.text.startswith("?"):
            count = self.tutor.highlight_value(self.text[1:].strip())
            self.status = f"Highlighted {count} element(s)."
            self.text = ""
            return None
        action = self.feature.default_action
        if action is None:
            return None
        return self.perform(action)

    def _report(self, result: Optional[OperationResult]):
        if result is None:
            return
        self.last_result = result
        self.status = result.message or self.engine.message
        logger.debug("%s: %s %s", self.feature.key, result.outcome.value, result.message)

    # --- canvas intents (logical canvas coordinates) ---

    def canvas_press(self, x: float, y: float, button: int = 1):
        key = self.feature.key
        if key == "pathfinding":
            cell = grid_cell_at(self.engine.rows, self.engine.cols, x, y)
            if cell is not None:
                self.last_cell = cell
                self._report_edit(self.engine.mouse_down(*cell))
        elif key == "graph":
            hit = hit_test(self.frame(), x, y)
            if hit is not None and button == 3:
                self._report_edit(self.engine.remove_node(hit))
            elif hit is not None:
                self.drag_node = hit
                self._report_edit(self.engine.click_node(hit))
            elif button == 1:
                self._report_edit(self.engine.add_node(x, y))
        elif key == "convex_hull":
            hit = hit_test(self.frame(), x, y, radius=10)
            if hit is not None and button == 3:
                self._report_edit(self.engine.remove_point(hit))
            elif button == 1 and 0 <= x <= self.engine.width and 0 <= y <= self.engine.height:
                self._report_edit(self.engine.add_point(x, y))

    def canvas_drag(self, x: float, y: float):
        key = self.feature.key
        if key == "pathfinding":
            cell = grid_cell_at(self.engine.rows, self.engine.cols, x, y)
            if cell is not None and cell != self.last_cell:
                self.last_cell = cell
                self._report_edit(self.engine.mouse_enter(*cell))
        elif key == "graph" and self.drag_node is not None:
            self.engine.move_node(self.drag_node, x, y)

    def canvas_release(self):
        if self.feature.key == "pathfinding":
            self.engine.mouse_up()
        self.drag_node = None
        self.last_cell = None

    def _report_edit(self, result: OperationResult):
        if result.message or not result.ok:
            self._report(result)

    # --- frame loop ---

    def update(self, dt: float):
        self.engine.update(dt)
        self.tutor.update(dt)
        if self.operation is not None and self.operation.done:
            self._report(self.operation.result)
            self.operation = None

    def current_step(self) -> Step:
        return self.engine.current_step()

    def frame(self) -> Frame:
        return frame_for(self.feature.key, self.current_step(), self.tutor.highlights)

    def teardown(self):
        self.engine.teardown()


# --- geometry shared by draw and input ---

def _areas(w: int, h: int) -> Tuple[pygame.Rect, pygame.Rect]:
    canvas_w = int(w * 0.64)
    return pygame.Rect(0, 0, canvas_w, h), pygame.Rect(canvas_w, 0, w - canvas_w, h)


def _transform(area: pygame.Rect, frame: Frame) -> Tuple[float, float, float]:
    scale = min((area.width - 40) / frame.width, (area.height - 40) / frame.height)
    scale = max(scale, 0.1)
    ox = area.x + (area.width - frame.width * scale) / 2
    oy = area.y + (area.height - frame.height * scale) / 2
    return scale, ox, oy


def _action_rects(panel: pygame.Rect, count: int) -> List[pygame.Rect]:
    per_row = max(1, (panel.width - 40 + BUTTON_GAP) // (BUTTON_W + BUTTON_GAP))
    top = panel.y + 330
    rects = []
    for i in range(count):
        row, col = divmod(i, per_row)
        rects.append(pygame.Rect(panel.x + 20 + col * (BUTTON_W + BUTTON_GAP),
                                 top + row * (BUTTON_H + BUTTON_GAP), BUTTON_W, BUTTON_H))
    return rects


def _timeline_rect(panel: pygame.Rect) -> pygame.Rect:
    return pygame.Rect(panel.x + 20, panel.bottom - 110, panel.width - 40, 4)


def _transport_rects(panel: pygame.Rect) -> List[Tuple[pygame.Rect, str]]:
    buttons = ["prev", "toggle", "next"]
    total_btn_w = len(buttons) * 80
    start_x = panel.x + (panel.width - total_btn_w) // 2
    btn_y = _timeline_rect(panel).y + 30
    return [(pygame.Rect(start_x + i * 80, btn_y, 60, 30), action) for i, action in enumerate(buttons)]


def _seek_index(state: VizState, panel: pygame.Rect, x: int) -> int:
    bar = _timeline_rect(panel)
    progress = max(0.0, min(1.0, (x - bar.x) / bar.width))
    return int(progress * (state.total_steps - 1))


# --- drawing ---

def _wrap(text: str, font: pygame.font.Font, width: int) -> List[str]:
    lines = []
    curr_line = ""
    for word in text.split(" "):
        test_line = curr_line + word + " "
        if font.size(test_line)[0] < width:
            curr_line = test_line
        else:
            lines.append(curr_line)
            curr_line = word + " "
    if curr_line:
        lines.append(curr_line)
    return lines


def _aux_lines(aux) -> List[str]:
    if not aux:
        return []
    if "kind" in aux and "items" in aux:
        if aux["kind"] == "table":
            cells = []
            for item in aux["items"]:
                dist = "inf" if math.isinf(item["dist"]) else f"{item['dist']:g}"
                cells.append(f"{item['label']}={dist}")
            return ["Distances: " + "  ".join(cells)]
        return [f"{aux['kind'].title()}: [" + ", ".join(i["label"] for i in aux["items"]) + "]"]
    lines = []
    for key, value in aux.items():
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        lines.append(f"{key.replace('_', ' ')}: {value}")
    return lines


def draw_frame(screen: pygame.Surface, area: pygame.Rect, frame: Frame, feature_key: str,
               font: pygame.font.Font, small_font: pygame.font.Font):
    scale, ox, oy = _transform(area, frame)

    def to_screen(x, y):
        return int(ox + x * scale), int(oy + y * scale)

    if frame.cell_size:
        # Grid background; only non-empty cells are frame elements
        size = frame.cell_size * scale
        pygame.draw.rect(screen, EMPTY_CELL, (ox, oy, frame.width * scale, frame.height * scale))
        for el in frame.elements:
            x, y = to_screen(el.x - frame.cell_size / 2, el.y - frame.cell_size / 2)
            pygame.draw.rect(screen, role_color(el.state), (x, y, math.ceil(size), math.ceil(size)))
        return

    if feature_key in POINTS:
        pygame.draw.rect(screen, EMPTY_CELL, (ox, oy, frame.width * scale, frame.height * scale), border_radius=8)

    for conn in frame.connections:
        color = GRID if conn.state == "default" else role_color(conn.state)
        width = 3 if conn.state != "default" else 2
        pygame.draw.line(screen, color, to_screen(conn.x1, conn.y1), to_screen(conn.x2, conn.y2), width)
        if conn.label:
            lbl = small_font.render(conn.label, True, TEXT_SECONDARY)
            mx, my = to_screen((conn.x1 + conn.x2) / 2, (conn.y1 + conn.y2) / 2)
            screen.blit(lbl, lbl.get_rect(center=(mx, my - 10)))

    radius = max(10, int(22 * scale))
    for el in frame.elements:
        cx, cy = to_screen(el.x, el.y)
        color = role_color(el.state)
        if feature_key in POINTS:
            pygame.draw.circle(screen, color, (cx, cy), 6)
            continue
        if feature_key in BOXED:
            rect = pygame.Rect(0, 0, int(90 * scale), int(36 * scale))
            rect.center = (cx, cy)
            pygame.draw.rect(screen, color, rect, border_radius=6)
            pygame.draw.rect(screen, GRID, rect, width=1, border_radius=6)
        else:
            pygame.draw.circle(screen, color, (cx, cy), radius)
            pygame.draw.circle(screen, GRID, (cx, cy), radius, width=1)
        if el.label:
            lbl = font.render(el.label, True, TEXT_MAIN)
            screen.blit(lbl, lbl.get_rect(center=(cx, cy)))
        if el.detail:
            det = small_font.render(el.detail, True, TEXT_MUTED)
            screen.blit(det, det.get_rect(center=(cx, cy + radius + 10)))

    for note in frame.annotations:
        lbl = small_font.render(note.text, True, TEXT_SECONDARY)
        screen.blit(lbl, lbl.get_rect(center=to_screen(note.x, note.y)))


def draw_viz(screen: pygame.Surface, font_title: pygame.font.Font, font_body: pygame.font.Font,
             small_font: pygame.font.Font, state: VizState):
    w, h = screen.get_size()
    canvas, panel = _areas(w, h)
    screen.fill(BG)

    step = state.current_step()
    draw_frame(screen, canvas, frame_for(state.feature.key, step, state.tutor.highlights),
               state.feature.key, font_body, small_font)

    # --- Side panel ---
    pygame.draw.rect(screen, PANEL_BG, panel)
    pygame.draw.line(screen, GRID, (panel.x, 0), (panel.x, h))

    y = 30
    title = font_title.render(state.feature.title, True, TEXT_MAIN)
    screen.blit(title, (panel.x + 20, y))
    y += 50

    for line in _wrap(step.message, font_body, panel.width - 40)[:4]:
        screen.blit(font_body.render(line, True, TEXT_SECONDARY), (panel.x + 20, y))
        y += 25
    y = max(y + 10, 190)
    for line in _aux_lines(step.aux)[:3]:
        for part in _wrap(line, small_font, panel.width - 40)[:2]:
            screen.blit(small_font.render(part, True, TEXT_MUTED), (panel.x + 20, y))
            y += 18

    # Input box
    input_rect = pygame.Rect(panel.x + 20, panel.y + 270, panel.width - 40, 40)
    pygame.draw.rect(screen, INPUT_BG, input_rect, border_radius=6)
    pygame.draw.rect(screen, GRID, input_rect, width=1, border_radius=6)
    shown = state.text + "|" if pygame.time.get_ticks() // 500 % 2 == 0 else state.text
    screen.blit(font_body.render(shown or " ", True, TEXT_MAIN), (input_rect.x + 10, input_rect.y + 9))

    for action, rect in zip(state.feature.actions, _action_rects(panel, len(state.feature.actions))):
        draw_button(screen, rect, action.label, font_body, radius=6)

    # Status line
    status_color = TEXT_SECONDARY
    if state.last_result is not None and state.last_result.outcome is not Outcome.OK:
        status_color = role_color("collision")
    for i, line in enumerate(_wrap(state.status, font_body, panel.width - 40)[:2]):
        screen.blit(font_body.render(line, True, status_color), (panel.x + 20, panel.bottom - 190 + i * 24))

    # Timeline Controls
    bar = _timeline_rect(panel)
    progress = state.current_index / (state.total_steps - 1) if state.total_steps > 1 else 0
    pygame.draw.rect(screen, GRID, bar)
    pygame.draw.circle(screen, TEXT_MAIN, (int(bar.x + bar.width * progress), bar.y + 2), 6)
    counter = small_font.render(f"Step {state.current_index + 1 if state.total_steps else 0} / {state.total_steps}",
                                True, TEXT_MUTED)
    screen.blit(counter, (bar.x, bar.y - 24))

    labels = {"prev": "<<", "toggle": "PAUSE" if state.playing else "PLAY", "next": ">>"}
    for rect, action in _transport_rects(panel):
        draw_button(screen, rect, labels[action], font_body, radius=4)


def handle_viz_input(event: pygame.event.Event, state: VizState, screen_size: tuple[int, int]) -> str | None:
    """Handles input for the feature view. Returns an action string for the frame loop."""
    w, h = screen_size
    canvas, panel = _areas(w, h)

    if event.type == pygame.TEXTINPUT:
        state.type_text(event.text)
        return None

    if event.type == pygame.KEYDOWN:
        if event.key == pygame.K_RETURN:
            state.submit()
            return "action"
        if event.key == pygame.K_BACKSPACE:
            state.backspace()
        elif event.key == pygame.K_LEFT:
            return "prev"
        elif event.key == pygame.K_RIGHT:
            return "next"
        elif event.key == pygame.K_TAB:
            return "toggle"
        return None

    if event.type == pygame.MOUSEBUTTONDOWN and event.button in (1, 3):
        if canvas.collidepoint(event.pos):
            scale, ox, oy = _transform(canvas, state.frame())
            state.canvas_press((event.pos[0] - ox) / scale, (event.pos[1] - oy) / scale, event.button)
            return None
        if event.button != 1:
            return None

        bar = _timeline_rect(panel).inflate(0, 20)
        if bar.collidepoint(event.pos) and state.total_steps:
            state.dragging_timeline = True
            state.set_step(_seek_index(state, panel, event.pos[0]))
            return "seek"

        for rect, action in _transport_rects(panel):
            if rect.collidepoint(event.pos):
                return action

        for action, rect in zip(state.feature.actions, _action_rects(panel, len(state.feature.actions))):
            if rect.collidepoint(event.pos):
                state.perform(action)
                return "action"

    elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
        state.dragging_timeline = False
        state.canvas_release()

    elif event.type == pygame.MOUSEMOTION:
        if state.dragging_timeline:
            state.set_step(_seek_index(state, panel, event.pos[0]))
        elif event.buttons[0] and canvas.collidepoint(event.pos):
            scale, ox, oy = _transform(canvas, state.frame())
            state.canvas_drag((event.pos[0] - ox) / scale, (event.pos[1] - oy) / scale)

    return None
