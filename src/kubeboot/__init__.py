"""kubeboot.

Bootstrap a Compute Engine VM into an authenticated client of its GKE cluster
without a pre-provisioned kubeconfig.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
