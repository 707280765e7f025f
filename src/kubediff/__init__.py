"""KubeDiff - semantic comparison of Kubernetes manifests."""

__version__ = "1.0.0"
