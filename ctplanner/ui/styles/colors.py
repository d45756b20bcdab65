"""Color palette constants for dark theme.

dark_theme.qss uses the same values.
"""

# Base theme colors
BACKGROUND = "#0F172A"
PANEL_BG = "#1E293B"
BORDER = "#475569"

# Accent colors
ACCENT = "#3B82F6"

# Semantic colors
WARNING = "#F59E0B"

# Text colors
TEXT_PRIMARY = "#F8FAFC"
TEXT_SECONDARY = "#B0BEC5"

# Resolution chart series
SWEEP_SERIES = "#58A6FF"
