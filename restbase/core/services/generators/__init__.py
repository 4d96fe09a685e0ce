"""
Generators — produce project files from configuration.

Each generator module exposes ``generate_*()`` functions that return
``GeneratedFile`` instances (or plain data for manifest merges). They
never touch the filesystem; plan builders turn their output into
WriteFile operations.
"""
