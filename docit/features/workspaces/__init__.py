"""Workspaces feature module"""
