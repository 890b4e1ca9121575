"""
Light and dark stylesheets for the whole application.

Both themes render one Qt stylesheet template from a palette: Catppuccin
Latte for light, Catppuccin Mocha for dark. The focus/break accent colours
are shared so the timer reads the same in either theme.
"""

from string import Template

from focusforge.data.models import Theme

LIGHT_PALETTE = {
    "base": "#eff1f5",
    "mantle": "#e6e9ef",
    "surface": "#ccd0da",
    "overlay": "#9ca0b0",
    "text": "#4c4f69",
    "subtext": "#6c6f85",
    "accent": "#1e66f5",
    "accent_hover": "#209fb5",
    "focus": "#d20f39",
    "short_break": "#40a02b",
    "long_break": "#8839ef",
    "warning": "#fe640b",
    "on_accent": "#eff1f5",
}

DARK_PALETTE = {
    "base": "#1e1e2e",
    "mantle": "#181825",
    "surface": "#313244",
    "overlay": "#585b70",
    "text": "#cdd6f4",
    "subtext": "#a6adc8",
    "accent": "#89b4fa",
    "accent_hover": "#74c7ec",
    "focus": "#f38ba8",
    "short_break": "#a6e3a1",
    "long_break": "#cba6f7",
    "warning": "#fab387",
    "on_accent": "#1e1e2e",
}

_TEMPLATE = Template("""
/* ── Base ────────────────────────────────────────────────────────── */
QWidget {
    background-color: $base;
    color: $text;
    font-family: "Segoe UI", "Inter", sans-serif;
    font-size: 13px;
}

/* ── Header strip ────────────────────────────────────────────────── */
QFrame#header {
    background-color: $mantle;
    border-bottom: 1px solid $surface;
}

QLabel#header_stat {
    font-weight: 600;
    color: $subtext;
    padding: 0 8px;
}

/* ── Buttons ─────────────────────────────────────────────────────── */
QPushButton {
    background-color: $surface;
    color: $text;
    border: 1px solid $overlay;
    border-radius: 8px;
    padding: 8px 18px;
    font-weight: 600;
}

QPushButton:hover {
    border-color: $accent;
}

QPushButton:checked {
    background-color: $accent;
    color: $on_accent;
    border: none;
}

QPushButton#primary {
    background-color: $accent;
    color: $on_accent;
    border: none;
}

QPushButton#primary:hover {
    background-color: $accent_hover;
}

QPushButton#danger {
    background-color: $focus;
    color: $on_accent;
    border: none;
}

QPushButton#distraction {
    background-color: $mantle;
    border: 1px dashed $warning;
}

/* ── Inputs ──────────────────────────────────────────────────────── */
QLineEdit, QTextEdit, QPlainTextEdit, QComboBox, QSpinBox {
    background-color: $mantle;
    color: $text;
    border: 1px solid $overlay;
    border-radius: 6px;
    padding: 6px 10px;
    selection-background-color: $accent;
    selection-color: $on_accent;
}

QLineEdit:focus, QTextEdit:focus, QPlainTextEdit:focus {
    border-color: $accent;
}

QComboBox QAbstractItemView, QListWidget {
    background-color: $mantle;
    color: $text;
    border: 1px solid $surface;
    selection-background-color: $surface;
    selection-color: $text;
}

/* ── Labels ──────────────────────────────────────────────────────── */
QLabel {
    background: transparent;
}

QLabel#title {
    font-size: 22px;
    font-weight: 700;
    color: $accent;
}

QLabel#subtitle, QLabel#metric_label, QLabel#status {
    color: $subtext;
}

QLabel#metric_value {
    font-size: 26px;
    font-weight: 700;
    color: $short_break;
}

QLabel#timer {
    font-size: 72px;
    font-weight: 700;
    font-family: "Consolas", "Courier New", monospace;
}

QLabel#timer[mode="focus"] { color: $focus; }
QLabel#timer[mode="short_break"] { color: $short_break; }
QLabel#timer[mode="long_break"] { color: $long_break; }

/* ── Cards / groups ──────────────────────────────────────────────── */
QFrame#card, QGroupBox {
    background-color: $mantle;
    border: 1px solid $surface;
    border-radius: 10px;
}

QGroupBox {
    margin-top: 12px;
    padding-top: 16px;
    font-weight: 600;
}

QGroupBox::title {
    subcontrol-origin: margin;
    left: 12px;
    padding: 0 6px;
    color: $accent;
}

/* ── Tabs ────────────────────────────────────────────────────────── */
QTabWidget::pane {
    border: 1px solid $surface;
    border-radius: 8px;
}

QTabBar::tab {
    background-color: $mantle;
    color: $subtext;
    padding: 10px 20px;
    margin-right: 2px;
    border-top-left-radius: 8px;
    border-top-right-radius: 8px;
    font-weight: 600;
}

QTabBar::tab:selected {
    background-color: $base;
    color: $accent;
    border-bottom: 2px solid $accent;
}

/* ── Slider / progress ───────────────────────────────────────────── */
QSlider::groove:horizontal {
    height: 6px;
    background-color: $surface;
    border-radius: 3px;
}

QSlider::handle:horizontal {
    width: 16px;
    margin: -5px 0;
    background-color: $accent;
    border-radius: 8px;
}

QProgressBar {
    background-color: $surface;
    border-radius: 4px;
    text-align: center;
    height: 12px;
}

QProgressBar::chunk {
    background-color: $accent;
    border-radius: 4px;
}

QCheckBox::indicator:checked {
    background-color: $accent;
    border: 2px solid $accent;
    border-radius: 4px;
}
""")

LIGHT_STYLESHEET = _TEMPLATE.substitute(LIGHT_PALETTE)
DARK_STYLESHEET = _TEMPLATE.substitute(DARK_PALETTE)


def stylesheet_for(theme: str) -> str:
    return DARK_STYLESHEET if theme == Theme.DARK else LIGHT_STYLESHEET


def palette_for(theme: str) -> dict:
    return DARK_PALETTE if theme == Theme.DARK else LIGHT_PALETTE
