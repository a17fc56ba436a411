"""Webhooks feature module"""
