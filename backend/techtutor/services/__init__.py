"""Service Layer — orchestrates core transforms around StateStore and the content client.
"""
