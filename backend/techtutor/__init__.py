"""TechTutor Application Package — learning state store and content pipeline.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
