"""Documents feature module"""
