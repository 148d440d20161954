"""protopkg — compile protobuf schemas into a self-contained Python package."""

__version__ = "0.1.0"
