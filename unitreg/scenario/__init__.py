"""Scenario replay — a scripted host for exercising a registry."""
