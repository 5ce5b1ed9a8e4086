"""Daily time-block planning backend."""
