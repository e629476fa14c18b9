"""
Deployment descriptor model, loading and normalization.
"""

from .schema import DeploymentDescriptor, DockerImage, Migrations
from .normalize import normalize
from .loader import load_descriptor_file

__all__ = [
    "DeploymentDescriptor",
    "DockerImage",
    "Migrations",
    "normalize",
    "load_descriptor_file",
]
