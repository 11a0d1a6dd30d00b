"""Arena session snapshots: capture, persist and restore player state."""
