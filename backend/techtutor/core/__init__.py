"""Core Layer — pure domain logic, no IO, no async, no DB.
"""
