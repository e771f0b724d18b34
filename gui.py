# gui.py

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import pygame

from features import Feature

WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 800

# Colors – higher contrast, refined dark mode
BG = (15, 15, 17)
CARD_BG = (30, 30, 34)
CARD_HOVER = (50, 50, 55)
GRID = (90, 90, 95)
TEXT_MAIN = (245, 245, 250)
TEXT_SECONDARY = (230, 230, 235)
TEXT_MUTED = (150, 150, 158)

# Element fill per role; anything unknown falls back to "default"
ROLE_COLORS: Dict[str, Tuple[int, int, int]] = {
    "default": (45, 140, 255),
    "empty": (45, 45, 49),
    "active": (255, 190, 60),
    "found": (60, 200, 80),
    "success": (60, 200, 80),
    "modifying": (250, 80, 80),
    "comparing": (190, 70, 210),
    "collision": (250, 80, 80),
    "overflow": (250, 80, 80),
    "pushing": (90, 220, 220),
    "enqueueing": (90, 220, 220),
    "dequeueing": (250, 80, 80),
    "new": (90, 220, 220),
    "popping": (250, 80, 80),
    "peek": (255, 190, 60),
    "imbalanced": (250, 80, 80),
    "highlighted": (255, 160, 210),
    "visited": (110, 120, 255),
    "current": (255, 190, 60),
    "frontier": (90, 220, 220),
    "path": (60, 200, 80),
    "traversed": (255, 190, 60),
    "start": (60, 200, 80),
    "finish": (250, 80, 80),
    "wall": (90, 90, 95),
    "hull": (60, 200, 80),
    "candidate": (250, 80, 80),
    "checking": (190, 70, 210),
    "ring": (45, 45, 49),
}


def role_color(role: str) -> Tuple[int, int, int]:
    return ROLE_COLORS.get(role, ROLE_COLORS["default"])


def draw_button(screen: pygame.Surface, rect: pygame.Rect, text: str, font: pygame.font.Font, radius: int = 12):
    color = CARD_HOVER if rect.collidepoint(pygame.mouse.get_pos()) else CARD_BG
    pygame.draw.rect(screen, color, rect, border_radius=radius)
    pygame.draw.rect(screen, GRID, rect, width=1, border_radius=radius)
    label = font.render(text, True, TEXT_MAIN)
    screen.blit(label, label.get_rect(center=rect.center))


def _menu_rects(count: int, screen_size: Tuple[int, int]) -> List[pygame.Rect]:
    w, h = screen_size

    # Two columns of buttons below the title
    start_y = h // 4 + 60
    button_height = 60
    spacing = 20
    button_width = min(400, (w - 120) // 2)
    left = (w - 2 * button_width - spacing) // 2

    rects = []
    for i in range(count):
        col, row = i % 2, i // 2
        rects.append(pygame.Rect(left + col * (button_width + spacing),
                                 start_y + row * (button_height + spacing),
                                 button_width, button_height))
    return rects


def draw_menu(screen: pygame.Surface, title_font: pygame.font.Font, button_font: pygame.font.Font,
              features: Sequence[Feature]):
    screen.fill(BG)
    w, h = screen.get_size()

    # Title
    title_surf = title_font.render("Data Structure Visualizer", True, TEXT_MAIN)
    title_rect = title_surf.get_rect(center=(w // 2, h // 4 - 20))
    screen.blit(title_surf, title_rect)

    for feature, rect in zip(features, _menu_rects(len(features), (w, h))):
        draw_button(screen, rect, feature.title, button_font)


def get_menu_action(mouse_pos: Tuple[int, int], features: Sequence[Feature],
                    screen_size: Tuple[int, int] = (WINDOW_WIDTH, WINDOW_HEIGHT)) -> Feature | None:
    # Match layout in draw_menu
    for feature, rect in zip(features, _menu_rects(len(features), screen_size)):
        if rect.collidepoint(mouse_pos):
            return feature
    return None
