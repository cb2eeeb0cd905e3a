"""Viewport state and escape-time evaluation"""
