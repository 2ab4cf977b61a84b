"""Stateless HTTP surface over the Org Chart Kernel."""
