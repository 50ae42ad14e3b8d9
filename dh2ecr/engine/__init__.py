"""
Local container engine used to move images between registries.
"""
