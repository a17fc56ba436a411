"""Workspace chat feature module"""
