"""HTTP API wiring"""
