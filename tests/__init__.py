"""
Test suite for the numeric core

Contains:
- tests/unit/          : Unit tests for individual modules
"""
