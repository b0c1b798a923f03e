"""
FORMCOACH Core

Application configuration.
"""
