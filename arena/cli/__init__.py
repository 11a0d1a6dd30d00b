"""Operator CLI for arena snapshots."""
