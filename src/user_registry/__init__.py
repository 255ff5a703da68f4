"""
User registry: a console application for managing user records.

Layers, leaf first: validators -> database gateway -> repositories -> services -> cli.
"""
