from __future__ import annotations
import logging
import pygame

from features import FEATURES
from gui import WINDOW_WIDTH, WINDOW_HEIGHT, draw_menu, get_menu_action
from ui_state import AppState, UIState
from ui_intro import draw_intro, get_intro_action
from ui_viz import VizState, draw_viz, handle_viz_input

def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    pygame.init()
    screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT), pygame.RESIZABLE)
    pygame.display.set_caption("Data Structure Visualizer")

    # Fonts
    title_font = pygame.font.SysFont("SF Pro Display", 32, bold=True)
    button_font = pygame.font.SysFont("SF Pro Text", 20)
    body_font = pygame.font.SysFont("SF Pro Text", 18)
    small_font = pygame.font.SysFont("SF Pro Text", 14)

    clock = pygame.time.Clock()
    app_state = AppState()

    # State for the feature view
    viz_state: VizState | None = None

    def leave_view():
        nonlocal viz_state
        if viz_state is not None:
            viz_state.teardown()
            viz_state = None
        app_state.current_state = UIState.MENU

    running = True
    while running:
        dt = clock.tick(60)  # milliseconds

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode((event.w, event.h), pygame.RESIZABLE)

            if app_state.current_state == UIState.MENU:
                if event.type == pygame.MOUSEBUTTONDOWN:
                    feature = get_menu_action(event.pos, FEATURES, screen.get_size())
                    if feature is not None:
                        app_state.selected_feature = feature
                        app_state.current_state = UIState.FEATURE_INTRO

            elif app_state.current_state == UIState.FEATURE_INTRO:
                if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    app_state.current_state = UIState.MENU
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    action = get_intro_action(event.pos, screen.get_size())
                    if action == "start_viz":
                        app_state.current_state = UIState.FEATURE_VIEW
                        print(f"Initializing visualization: {app_state.selected_feature.title}...")
                        viz_state = VizState(app_state.selected_feature)
                    elif action == "menu":
                        app_state.current_state = UIState.MENU

            elif app_state.current_state == UIState.FEATURE_VIEW and viz_state:
                if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    leave_view()
                    continue
                action = handle_viz_input(event, viz_state, screen.get_size())

                if action == "prev":
                    viz_state.step_backward()
                elif action == "next":
                    viz_state.step_forward()
                elif action == "toggle":
                    viz_state.toggle_play()

        # Update
        if app_state.current_state == UIState.FEATURE_VIEW and viz_state:
            viz_state.update(dt)

        # Draw
        if app_state.current_state == UIState.MENU:
            draw_menu(screen, title_font, button_font, FEATURES)

        elif app_state.current_state == UIState.FEATURE_INTRO:
            draw_intro(screen, title_font, body_font, app_state.selected_feature)

        elif app_state.current_state == UIState.FEATURE_VIEW and viz_state:
            draw_viz(screen, title_font, body_font, small_font, viz_state)

        pygame.display.flip()

    if viz_state is not None:
        viz_state.teardown()
    print("Goodbye.")
    pygame.quit()

if __name__ == "__main__":
    main()
