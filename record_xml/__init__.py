"""record-xml: XML fixture codec for document-processing records."""

__version__ = "1.0.0"
