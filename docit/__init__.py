"""DOCIT backend: collaborative document workspaces"""

__version__ = "1.0.0"
