"""Notifications feature module"""
