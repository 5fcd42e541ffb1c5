"""Infrastructure Layer — state store backends, content client, logging setup.
"""
