"""
Test suite for Report Charts

This package contains unit tests and fixtures for the chart compiler.
"""
