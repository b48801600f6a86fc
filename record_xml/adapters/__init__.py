"""Adapters layer for record-xml.

This module contains the adapters that translate records to and from external
document formats. Adapters implement Port interfaces defined in the domain
layer.
"""
