"""Services package for review scheduling, undo, preferences and streaks."""
