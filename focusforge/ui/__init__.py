from .main_window import MainWindow
from .dashboard_widget import DashboardWidget
from .focus_widget import FocusWidget
from .notes_widget import NotesWidget
from .review_widget import ReviewWidget
from .settings_widget import SettingsWidget

__all__ = [
    "MainWindow", "DashboardWidget", "FocusWidget", "NotesWidget",
    "ReviewWidget", "SettingsWidget",
]
