# Identity and cluster discovery for the local instance
from .base import DiscoveryError, IdentityError
from .cluster import ClusterDiscoverer
from .identity import IdentityResolver

__all__ = ["ClusterDiscoverer", "DiscoveryError", "IdentityError", "IdentityResolver"]
