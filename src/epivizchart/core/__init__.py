"""Core types shared across epivizchart."""
