"""Command-line interface for FaceCam."""
