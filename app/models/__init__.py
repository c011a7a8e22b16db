from .habit import Habit, HabitFrequency, HabitDifficulty
from .productivity import ProductivityMetrics

__all__ = [
    "Habit",
    "HabitFrequency",
    "HabitDifficulty",
    "ProductivityMetrics",
]
