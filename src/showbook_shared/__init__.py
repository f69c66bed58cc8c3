"""Shared domain models and services for the show booking backend."""
