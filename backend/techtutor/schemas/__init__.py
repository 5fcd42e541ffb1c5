"""Pydantic Schemas — persisted state records and the learning-content contract.
"""
