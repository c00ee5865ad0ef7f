"""
Exception types for FaceCam.
"""


class FaceCamError(Exception):
    """Base class for all FaceCam errors."""
    pass


class ConfigurationError(FaceCamError):
    """Invalid configuration value."""
    pass


class CameraUnavailableError(FaceCamError):
    """The camera could not be opened (missing device or access refused)."""
    pass


class ModelLoadError(FaceCamError):
    """A model could not be loaded at startup."""
    pass


class LabelTableError(ModelLoadError):
    """The class label table is missing or empty."""
    pass


class ClassificationError(FaceCamError):
    """Classifier output does not match the label table."""
    pass
