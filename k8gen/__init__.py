"""
k8gen - container and Kubernetes artifact generation from a deployment descriptor.

This package normalizes a deployment descriptor, enriches it with facts
discovered in the project, asks a text-generation provider for the build and
deploy files, and splits the delimited response into files on disk.
"""

__version__ = "0.1.0"
__author__ = "k8gen"
