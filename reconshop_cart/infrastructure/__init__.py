"""
Infrastructure layer: persistence, logging and shared utilities
"""
