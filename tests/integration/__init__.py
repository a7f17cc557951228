"""Integration tests for kubeboot.

These tests need a Compute Engine VM with a reachable metadata service and are
skipped elsewhere.
"""
