"""Mutation engine services."""
