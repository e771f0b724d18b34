import pygame
from gui import BG, TEXT_MAIN, TEXT_SECONDARY, draw_button
from features import Feature

def _buttons(w: int, h: int):
    return [
        (pygame.Rect(40, h - 80, 120, 50), "< Back", "menu"),
        (pygame.Rect(w - 160, h - 80, 120, 50), "Start >", "start_viz"),
    ]

def draw_intro(screen: pygame.Surface, title_font: pygame.font.Font, body_font: pygame.font.Font, feature: Feature):
    screen.fill(BG)
    w, h = screen.get_size()

    # Title
    title = title_font.render(f"How it Works: {feature.title}", True, TEXT_MAIN)
    screen.blit(title, (40, 40))

    y = 100
    for line in feature.description:
        surf = body_font.render(line, True, TEXT_SECONDARY)
        screen.blit(surf, (40, y))
        y += 30

    y += 20
    actions = ", ".join(a.label for a in feature.actions)
    screen.blit(body_font.render(f"Controls: {actions}", True, TEXT_SECONDARY), (40, y))

    for rect, text, _ in _buttons(w, h):
        draw_button(screen, rect, text, body_font, radius=8)

def get_intro_action(mouse_pos: tuple[int, int], screen_size: tuple[int, int]) -> str | None:
    w, h = screen_size
    for rect, _, action in _buttons(w, h):
        if rect.collidepoint(mouse_pos):
            return action
    return None
