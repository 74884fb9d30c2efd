"""FitSmart: AI-powered biomechanical audit of workout routines."""

__version__ = "0.1.0"
