"""Bootstrap steps: identity, credentials, cluster resolution and kubeconfig synthesis."""
