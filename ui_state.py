from enum import Enum, auto

class UIState(Enum):
    MENU = auto()
    FEATURE_INTRO = auto()
    FEATURE_VIEW = auto()

class AppState:
    def __init__(self):
        self.current_state = UIState.MENU
        self.selected_feature = None  # features.Feature
