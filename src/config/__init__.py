"""Configuration loading and settings."""
