"""KubeTabs: a tabbed terminal browser for Kubernetes resources."""

__version__ = "0.1.0"
