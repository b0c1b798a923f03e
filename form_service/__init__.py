"""
FORMCOACH Form Service

Exercise form analysis from pose landmarks.
"""
