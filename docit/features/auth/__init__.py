"""Authentication feature module"""
