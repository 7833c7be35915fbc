"""
Test suite for the docx_cascade package.
"""
