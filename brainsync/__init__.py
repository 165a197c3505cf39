"""BrainSync — a Pomodoro focus timer with fatigue tracking."""

__version__ = "0.1.0"
